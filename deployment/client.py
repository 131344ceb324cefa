from typing import Any, List, Optional, Protocol, Sequence

from ape import convert, networks, project
from ape.logging import logger


class PendingDeployment(Protocol):
    def wait_for_deployment(self) -> str:
        ...


class ChainClient(Protocol):
    """Submits contract deployments; confirmation is awaited separately."""

    def deploy_contract(
        self, name: str, args: Sequence[Any], value: Optional[Any] = None
    ) -> PendingDeployment:
        ...


class ApeDeployment:
    def __init__(self, name: str, receipt):
        self.name = name
        self.receipt = receipt

    def wait_for_deployment(self) -> str:
        self.receipt.await_confirmations()
        if self.receipt.failed:
            raise RuntimeError(f"{self.name} deployment transaction {self.receipt.txn_hash} failed")
        address = self.receipt.contract_address
        if not address:
            raise RuntimeError(f"{self.name} deployment receipt has no contract address")
        return str(address)


class ApeChainClient:
    """
    Deploys contracts from the active ape project using ``account`` as the sender.

    Submission returns as soon as the transaction is accepted by the provider; the
    required confirmations are awaited by ``ApeDeployment.wait_for_deployment``.
    """

    def __init__(self, account):
        self.account = account

    @property
    def address(self) -> str:
        return str(self.account.address)

    def deploy_contract(self, name, args, value=None) -> ApeDeployment:
        container = project.get_contract(name)
        kwargs = {"sender": self.account, "required_confirmations": 0}
        if value is not None:
            kwargs["value"] = convert(value, int)
        txn = container.constructor.serialize_transaction(*args, **kwargs)
        receipt = self.account.call(txn)
        logger.info(f"{name} deployment submitted in {receipt.txn_hash}")
        return ApeDeployment(name, receipt)

    def publish_contracts(self, ledger) -> List[str]:
        """
        Publish every recorded contract to the network explorer.

        Runs after the ledger is complete; a contract that fails to publish is already
        deployed, so the failure is logged and the remaining contracts are still published.
        Returns the modules that could not be published.
        """
        explorer = networks.provider.network.explorer
        failed = []
        for record in ledger.records():
            logger.info(f"Verifying {record.module} at {record.address}")
            try:
                explorer.publish_contract(record.address)
            except Exception as e:
                logger.error(f"Could not publish {record.module}: {e}")
                failed.append(record.module)
        return failed
