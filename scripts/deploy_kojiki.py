#!/usr/bin/python3

from pathlib import Path

import click
from ape.cli import ConnectedProviderCommand, account_option

from deployment.client import ApeChainClient
from deployment.constants import CONSTRUCTOR_PARAMS_DIR, LOCAL_BLOCKCHAIN_ENVIRONMENTS
from deployment.errors import DeploymentError
from deployment.params import Deployer

CONSTRUCTOR_PARAMS_FILEPATH = CONSTRUCTOR_PARAMS_DIR / "kojiki" / "base.yml"


@click.command(cls=ConnectedProviderCommand)
@account_option()
@click.option(
    "--constructor-params",
    "constructor_params_filepath",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=CONSTRUCTOR_PARAMS_FILEPATH,
    show_default=True,
)
@click.option(
    "--registry-filepath",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Where to write the registry; defaults to the artifacts directory.",
)
@click.option(
    "--verify/--no-verify",
    default=None,
    help="Publish contracts to the explorer. On by default for non-local networks.",
)
def cli(network, account, constructor_params_filepath, registry_filepath, verify):
    """
    Deploys the Kojiki contracts in dependency order: Lock, KojikiFactory,
    KojikiRouter, SakeToken, SakeStakeToken, KojikiMaster, NFTPoolFactory, PositionHelper,
    RaitoPoolFactory, Dividends, FairAuction, YieldBooster, Launchpad and Multicall2.

    ape run deploy_kojiki --network base:mainnet:alchemy --account deployer
    """
    if verify is None:
        verify = network.name not in LOCAL_BLOCKCHAIN_ENVIRONMENTS

    client = ApeChainClient(account=account)
    try:
        deployer = Deployer.from_yaml(
            filepath=constructor_params_filepath,
            client=client,
            registry_filepath=registry_filepath,
        )
    except FileExistsError as e:
        raise click.ClickException(f"{e}; pass --registry-filepath to write elsewhere") from e
    except DeploymentError as e:
        raise click.ClickException(str(e)) from e

    try:
        ledger = deployer.run()
    except DeploymentError as e:
        if e.ledger:
            click.echo("Deployed before the failure:")
            for module, address in e.ledger.addresses().items():
                click.echo(f"  {module} {address}")
        raise click.ClickException(str(e)) from e

    deployer.finalize(ledger)

    if verify:
        failed = client.publish_contracts(ledger)
        if failed:
            click.echo(f"Could not verify: {', '.join(failed)}")
