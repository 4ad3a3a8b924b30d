"""
Theurgy Deploy - Deploy the CreateAndManageHTSTokens contract.

Before sending, the endpoint must report the selected network's chain id and
the deployer must hold some HBAR for gas.  Bytecode is read from the Hardhat
artifact; the deployed address is saved as HTS_CONTRACT_ADDRESS in
~/.aurum/.env unless --no-save is given.
"""

from __future__ import annotations

import click

from ..config import CONTRACT_KEY
from ..errors import AurumError, ConfigError
from ..pneuma.abi import HTS_CONTRACT_NAME, load_bytecode
from ..pneuma.executor import DEFAULT_DEPLOY_GAS_LIMIT
from ..session import Session
from ..sigil.eth import save_env_value
from . import _report
from .balance import format_units


@click.command()
@click.option("--gas-limit", default=DEFAULT_DEPLOY_GAS_LIMIT, show_default=True,
              type=click.IntRange(min=1),
              help="Gas limit")
@click.option("--save/--no-save", default=True, show_default=True,
              help=f"Write {CONTRACT_KEY} to the config file")
@click.pass_obj
def deploy(session: Session, gas_limit: int, save: bool) -> None:
    """Deploy the CreateAndManageHTSTokens contract."""
    _report.heading(f"Deploying {HTS_CONTRACT_NAME} contract")

    try:
        bytecode = load_bytecode(HTS_CONTRACT_NAME)
    except (FileNotFoundError, ValueError) as exc:
        raise ConfigError(str(exc)) from None

    deployer = session.executor.address
    _report.field("Deployer", deployer)
    _report.field("Network", session.network.name)

    chain_id = session.client.get_chain_id()
    if chain_id != session.network.chain_id:
        raise ConfigError(
            f"{session.network.rpc_url} reports chain {chain_id}, "
            f"expected {session.network.chain_id} for {session.network.name}"
        )

    balance = session.client.get_balance(deployer)
    _report.field("Balance", f"{format_units(balance, 18)} HBAR")
    if balance == 0:
        raise AurumError(f"Deployer {deployer} has no HBAR. Fund it before deploying.")

    receipt = session.executor.deploy(bytecode, gas_limit=gas_limit)
    if not receipt.contract_address:
        raise AurumError(f"No contract address in deployment receipt {receipt.tx_hash}")

    _report.step("Deployment Complete")
    _report.field("Address", receipt.contract_address)
    _report.tx(receipt)

    if save:
        path = save_env_value(CONTRACT_KEY, receipt.contract_address, session.config.env_path)
        _report.field("Saved to", path)
    else:
        _report.hint(f"Set {CONTRACT_KEY}={receipt.contract_address} before the next step.")
