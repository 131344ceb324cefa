from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Optional

from deployment.errors import DuplicateModuleError


@dataclass(frozen=True)
class DeploymentRecord:
    module: str
    address: str
    index: int
    contract: Optional[str] = None


class DeploymentLedger:
    """
    Append-only mapping of module identifier to its deployment record.

    Iteration order is execution order; every identifier is written exactly once.
    """

    def __init__(self, records: Iterable[DeploymentRecord] = ()):
        self._records: Dict[str, DeploymentRecord] = {}
        for record in records:
            self._append(record)

    def _append(self, record: DeploymentRecord) -> None:
        if record.module in self._records:
            raise DuplicateModuleError(
                f"{record.module} is already recorded at {self._records[record.module].address}",
                module=record.module,
                ledger=self,
            )
        self._records[record.module] = record

    def record(self, module: str, address: str, contract: Optional[str] = None) -> DeploymentRecord:
        record = DeploymentRecord(
            module=module, address=address, index=len(self._records), contract=contract
        )
        self._append(record)
        return record

    def address_of(self, module: str) -> str:
        return self._records[module].address

    def __getitem__(self, module: str) -> DeploymentRecord:
        return self._records[module]

    def __contains__(self, module) -> bool:
        return module in self._records

    def __iter__(self) -> Iterator[str]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __eq__(self, other):
        if not isinstance(other, DeploymentLedger):
            return NotImplemented
        return list(self._records.values()) == list(other._records.values())

    def __repr__(self):
        return f"DeploymentLedger({self.addresses()!r})"

    def records(self) -> List[DeploymentRecord]:
        return list(self._records.values())

    def addresses(self) -> Dict[str, str]:
        return {module: record.address for module, record in self._records.items()}
