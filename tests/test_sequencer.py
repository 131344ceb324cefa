import pytest

from deployment.errors import (
    ConfirmationError,
    DeploymentError,
    DuplicateModuleError,
    SubmissionError,
    UnresolvedReferenceError,
)
from deployment.sequencer import run
from deployment.specs import Configuration, Constant, DeploymentSpec, Literal, Reference

WETH = "0x4200000000000000000000000000000000000006"
OWNER = "0x99EDeCAc3106Ae3C322b84C30aEae03086586B63"


@pytest.fixture
def config():
    return Configuration(constants={"owner": OWNER, "weth": WETH, "start": "1692513641"})


@pytest.fixture
def specs():
    return [
        DeploymentSpec("A", [Literal(OWNER)]),
        DeploymentSpec("B", [Reference("A"), Literal(WETH)]),
        DeploymentSpec("C", [Reference("A"), Reference("B")]),
    ]


def notices(captured):
    return [line for line in captured.out.splitlines() if " contract 0x" in line]


def test_ledger_follows_spec_order(specs, config, client):
    ledger = run(specs, config, client)

    assert list(ledger) == ["A", "B", "C"]
    assert [record.index for record in ledger.records()] == [0, 1, 2]
    assert client.submitted == ["A", "B", "C"]
    assert client.confirmations == ["A", "B", "C"]


def test_references_resolve_to_recorded_addresses(specs, config, client):
    ledger = run(specs, config, client)
    address_a = ledger.address_of("A")
    address_b = ledger.address_of("B")

    _, b_args, _ = client.submissions[1]
    assert b_args == [address_a, WETH]
    _, c_args, _ = client.submissions[2]
    assert c_args == [address_a, address_b]


def test_constants_and_value_are_resolved(config, client):
    specs = [
        DeploymentSpec(
            "Lock", [Constant("start")], value=Literal("0.001 ether"), contract="TimeLock"
        ),
        DeploymentSpec("Master", [Reference("Lock"), Constant("owner")]),
    ]
    ledger = run(specs, config, client)

    assert client.submissions[0] == ("TimeLock", ["1692513641"], "0.001 ether")
    assert client.submissions[1] == ("Master", [ledger.address_of("Lock"), OWNER], None)
    assert ledger["Lock"].contract == "TimeLock"


def test_completion_notice_per_step(specs, config, client, capsys):
    ledger = run(specs, config, client)

    assert notices(capsys.readouterr()) == [
        f"{module} contract {address}" for module, address in ledger.addresses().items()
    ]


def test_unresolved_reference_aborts_before_submission(config, client):
    specs = [DeploymentSpec("A"), DeploymentSpec("B", [Reference("Z")]), DeploymentSpec("C")]

    with pytest.raises(UnresolvedReferenceError) as exc_info:
        run(specs, config, client)

    error = exc_info.value
    assert error.module == "B"
    assert error.reference == "Z"
    assert list(error.ledger) == ["A"]
    assert client.submitted == ["A"]


def test_missing_constant_is_unresolved(client):
    specs = [DeploymentSpec("A", [Constant("owner")])]

    with pytest.raises(UnresolvedReferenceError) as exc_info:
        run(specs, Configuration(), client)

    assert exc_info.value.kind == "constant"
    assert client.submissions == []


@pytest.mark.parametrize("failing", ["A", "B", "C"])
def test_confirmation_failure_keeps_earlier_steps(specs, config, make_client, failing):
    client = make_client(fail_confirmation=[failing])
    modules = [spec.module for spec in specs]
    k = modules.index(failing)

    with pytest.raises(ConfirmationError) as exc_info:
        run(specs, config, client)

    error = exc_info.value
    assert error.module == failing
    assert list(error.ledger) == modules[:k]
    assert failing not in error.ledger
    assert client.submitted == modules[: k + 1]
    assert isinstance(error.__cause__, TimeoutError)


def test_submission_failure_aborts_run(specs, config, make_client, capsys):
    client = make_client(fail_submission=["B"])

    with pytest.raises(SubmissionError) as exc_info:
        run(specs, config, client)

    error = exc_info.value
    assert error.module == "B"
    assert list(error.ledger) == ["A"]
    assert client.submitted == ["A", "B"]
    assert client.confirmations == ["A"]
    assert len(notices(capsys.readouterr())) == 1


def test_duplicate_module_is_rejected(config, client):
    specs = [DeploymentSpec("A"), DeploymentSpec("A")]

    with pytest.raises(DuplicateModuleError) as exc_info:
        run(specs, config, client)

    assert isinstance(exc_info.value, DeploymentError)
    assert list(exc_info.value.ledger) == ["A"]


def test_repeated_runs_deploy_fresh_contracts(specs, config, make_client):
    first = run(specs, config, make_client())
    second = run(specs, config, make_client())

    # same pipeline, independent deployments
    assert list(first) == list(second)
    assert first != second
    assert set(first.addresses().values()).isdisjoint(second.addresses().values())


def test_empty_pipeline(config, client):
    ledger = run([], config, client)
    assert len(ledger) == 0
    assert client.submissions == []
