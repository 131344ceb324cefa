import itertools

import pytest

DEPLOYER_ADDRESS = "0x00000000000000000000000000000000000000De"

# shared across clients so that separate runs never hand out the same address
_addresses = (f"0x{n:040x}" for n in itertools.count(1))


class FakeDeployment:
    def __init__(self, client, name, address):
        self.client = client
        self.name = name
        self.address = address

    def wait_for_deployment(self):
        self.client.confirmations.append(self.name)
        if self.name in self.client.fail_confirmation:
            raise TimeoutError(f"{self.name} was never mined")
        return self.address


class FakeChainClient:
    address = DEPLOYER_ADDRESS

    def __init__(self, fail_submission=(), fail_confirmation=()):
        self.fail_submission = set(fail_submission)
        self.fail_confirmation = set(fail_confirmation)
        self.submissions = []
        self.confirmations = []
        self.published = []

    def deploy_contract(self, name, args, value=None):
        self.submissions.append((name, list(args), value))
        if name in self.fail_submission:
            raise ValueError("insufficient funds for gas * price + value")
        return FakeDeployment(self, name, next(_addresses))

    def publish_contracts(self, ledger):
        self.published.extend(ledger)
        return []

    @property
    def submitted(self):
        return [name for name, _, _ in self.submissions]


@pytest.fixture
def client():
    return FakeChainClient()


@pytest.fixture
def make_client():
    return FakeChainClient
