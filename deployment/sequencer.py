from typing import Any, List, Sequence

from ape.logging import logger

from deployment.errors import (
    ConfirmationError,
    DeploymentError,
    SubmissionError,
    UnresolvedReferenceError,
)
from deployment.ledger import DeploymentLedger
from deployment.specs import Argument, Configuration, Constant, DeploymentSpec, Reference


def resolve(
    module: str, arg: Argument, ledger: DeploymentLedger, config: Configuration
) -> Any:
    if isinstance(arg, Reference):
        if arg.module not in ledger:
            raise UnresolvedReferenceError(module, arg.module, ledger=ledger)
        return ledger.address_of(arg.module)
    if isinstance(arg, Constant):
        if arg.name not in config:
            raise UnresolvedReferenceError(module, arg.name, ledger=ledger, kind="constant")
        return config[arg.name]
    return arg.value


def resolve_args(spec: DeploymentSpec, ledger: DeploymentLedger, config: Configuration) -> List:
    return [resolve(spec.module, arg, ledger, config) for arg in spec.args]


def deploy_step(spec: DeploymentSpec, ledger: DeploymentLedger, config: Configuration, client):
    """Deploy a single module and record it; returns the new record."""
    args = resolve_args(spec, ledger, config)
    value = None if spec.value is None else resolve(spec.module, spec.value, ledger, config)

    logger.info(f"Deploying {spec.module} ({spec.contract_name}) with args {args}")
    try:
        pending = client.deploy_contract(spec.contract_name, args, value=value)
    except Exception as e:
        raise SubmissionError(
            f"{spec.module} deployment was rejected: {e}", module=spec.module, ledger=ledger
        ) from e

    logger.debug(f"Waiting for {spec.module} deployment to be confirmed")
    try:
        address = pending.wait_for_deployment()
    except Exception as e:
        raise ConfirmationError(
            f"{spec.module} deployment was not confirmed: {e}", module=spec.module, ledger=ledger
        ) from e

    record = ledger.record(spec.module, address, contract=spec.contract_name)
    print(f"{spec.module} contract {address}")
    return record


def run(specs: Sequence[DeploymentSpec], config: Configuration, client) -> DeploymentLedger:
    """
    Deploy every spec in the given order, one at a time.

    The order is trusted: each spec may only reference modules that appear before it.
    The first failure aborts the run; the raised ``DeploymentError`` names the failing
    module and holds the ledger of the steps confirmed before it.
    """
    ledger = DeploymentLedger()
    for spec in specs:
        try:
            deploy_step(spec, ledger, config, client)
        except DeploymentError:
            logger.error(f"Deployment aborted at {spec.module} after {len(ledger)} step(s)")
            raise
    return ledger
