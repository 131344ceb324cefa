import json
from pathlib import Path
from typing import Optional

from deployment.ledger import DeploymentLedger, DeploymentRecord


def write_registry(
    ledger: DeploymentLedger,
    filepath: Path,
    name: Optional[str] = None,
    chain_id: Optional[int] = None,
) -> Path:
    filepath = Path(filepath)
    if filepath.exists():
        raise FileExistsError(f"Registry {filepath} already exists")

    data = {
        "name": name,
        "chain_id": chain_id,
        "deployments": [
            {
                "index": record.index,
                "module": record.module,
                "contract": record.contract,
                "address": record.address,
            }
            for record in ledger.records()
        ],
    }
    filepath.parent.mkdir(parents=True, exist_ok=True)
    with open(filepath, "w") as file:
        json.dump(data, file, indent=4)
    return filepath


def read_registry(filepath: Path) -> DeploymentLedger:
    with open(filepath, "r") as file:
        data = json.load(file)
    records = (
        DeploymentRecord(
            module=entry["module"],
            address=entry["address"],
            index=entry["index"],
            contract=entry.get("contract"),
        )
        for entry in sorted(data["deployments"], key=lambda e: e["index"])
    )
    return DeploymentLedger(records)
