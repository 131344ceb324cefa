import time
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

import yaml
from ape.logging import logger

from deployment import sequencer
from deployment.constants import (
    ARTIFACTS_DIR,
    DEPLOYER_INDICATOR,
    NOW_INDICATOR,
    SPECIAL_VARIABLE_DELIMITER,
    VARIABLE_PREFIX,
)
from deployment.errors import UnresolvedReferenceError
from deployment.ledger import DeploymentLedger
from deployment.registry import write_registry
from deployment.specs import Argument, Configuration, Constant, DeploymentSpec, Literal, Reference


def _is_variable(value: Any) -> bool:
    return isinstance(value, str) and value.startswith(VARIABLE_PREFIX)


def _expand_special_variable(value: str, deployer_address: Optional[str] = None) -> Any:
    variable = value[len(VARIABLE_PREFIX) :]
    kind, _, operand = variable.partition(SPECIAL_VARIABLE_DELIMITER)
    if kind == NOW_INDICATOR:
        offset = int(operand) if operand else 0
        return int(time.time()) + offset
    if kind == DEPLOYER_INDICATOR and not operand:
        if deployer_address is None:
            raise ValueError(f"'{value}' needs a deployer account")
        return deployer_address
    raise ValueError(f"Unknown special variable '{value}'")


def _expand_constants(constants: Dict[str, Any], deployer_address=None) -> Dict[str, Any]:
    expanded = {}
    for name, value in constants.items():
        if _is_variable(value):
            value = _expand_special_variable(value, deployer_address=deployer_address)
        expanded[name] = value
    return expanded


def _is_special_variable(name: str) -> bool:
    return SPECIAL_VARIABLE_DELIMITER in name or name in (NOW_INDICATOR, DEPLOYER_INDICATOR)


def _to_argument(value: Any, config: Configuration, deployer_address=None) -> Argument:
    if not _is_variable(value):
        return Literal(value)
    name = value[len(VARIABLE_PREFIX) :]
    if name in config:
        return Constant(name)
    if _is_special_variable(name):
        return Literal(_expand_special_variable(value, deployer_address=deployer_address))
    return Reference(name)


def _parse_entry(entry: Any, config: Configuration, deployer_address=None) -> DeploymentSpec:
    if isinstance(entry, str):
        return DeploymentSpec(module=entry)
    if not isinstance(entry, dict) or len(entry) != 1:
        raise ValueError(f"Invalid contract entry {entry!r}; expected a name or a single-key mapping")

    (module, body), = entry.items()
    if body is None:
        return DeploymentSpec(module=module)
    if isinstance(body, list):
        args = [_to_argument(v, config, deployer_address) for v in body]
        return DeploymentSpec(module=module, args=args)
    if isinstance(body, dict):
        unknown = set(body) - {"constructor", "value", "contract"}
        if unknown:
            raise ValueError(f"{module} has unknown keys {sorted(unknown)}")
        value = body.get("value")
        return DeploymentSpec(
            module=module,
            args=[
                _to_argument(v, config, deployer_address) for v in body.get("constructor") or []
            ],
            contract=body.get("contract"),
            value=None if value is None else _to_argument(value, config, deployer_address),
        )
    raise ValueError(f"Invalid constructor parameters for {module}: {body!r}")


def parse_params(
    params: Dict, deployer_address: Optional[str] = None
) -> Tuple[List[DeploymentSpec], Configuration]:
    deployment = params.get("deployment") or {}
    constants = _expand_constants(params.get("constants") or {}, deployer_address)
    config = Configuration(
        constants=constants, name=deployment.get("name"), chain_id=deployment.get("chain_id")
    )

    specs = []
    seen = set()
    for entry in params.get("contracts") or []:
        spec = _parse_entry(entry, config, deployer_address)
        if spec.module in seen:
            raise ValueError(f"{spec.module} is declared more than once")
        seen.add(spec.module)
        specs.append(spec)
    return specs, config


def load_params(filepath: Path, deployer_address: Optional[str] = None):
    with open(filepath, "r") as file:
        params = yaml.safe_load(file)
    return parse_params(params, deployer_address=deployer_address)


def check_references(specs: Sequence[DeploymentSpec]) -> None:
    """Raise if any spec references a module that is not declared before it."""
    declared = set()
    for spec in specs:
        for reference in spec.references():
            if reference not in declared:
                raise UnresolvedReferenceError(spec.module, reference, ledger=DeploymentLedger())
        declared.add(spec.module)


class Deployer:
    """Runs a fixed, ordered deployment pipeline against a chain client."""

    def __init__(
        self,
        specs: Sequence[DeploymentSpec],
        config: Configuration,
        client,
        registry_filepath: Optional[Path] = None,
    ):
        check_references(specs)
        if registry_filepath is None:
            registry_filepath = ARTIFACTS_DIR / f"{config.name or 'deployment'}.json"
        registry_filepath = Path(registry_filepath)
        # the registry must be writable before anything is submitted
        if registry_filepath.exists():
            raise FileExistsError(f"Registry {registry_filepath} already exists")

        self.specs = list(specs)
        self.config = config
        self.client = client
        self.registry_filepath = registry_filepath

    @classmethod
    def from_yaml(cls, filepath: Path, client, registry_filepath: Optional[Path] = None):
        deployer_address = getattr(client, "address", None)
        specs, config = load_params(filepath, deployer_address=deployer_address)
        logger.info(f"Loaded {len(specs)} deployment(s) from {filepath}")
        return cls(specs=specs, config=config, client=client, registry_filepath=registry_filepath)

    def run(self) -> DeploymentLedger:
        return sequencer.run(self.specs, self.config, self.client)

    def finalize(self, ledger: DeploymentLedger) -> Path:
        filepath = write_registry(
            ledger, self.registry_filepath, name=self.config.name, chain_id=self.config.chain_id
        )
        logger.success(f"Registry written to {filepath}")
        return filepath
