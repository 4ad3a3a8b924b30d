"""
Theurgy Mint - Mint fungible tokens to the treasury.

The contract holds the token's SUPPLY key, so minting goes through
mintTokenPublic and the new units land in the treasury (the contract).
"""

from __future__ import annotations

import click

from ..pneuma.executor import TxOptions, TxReceipt, TxRequest
from ..pneuma.hts import INT64_MAX
from ..session import Session
from . import _report

MINT_GAS_LIMIT = 75_000


def mint_to_treasury(session: Session, amount: int, gas_limit: int = MINT_GAS_LIMIT) -> TxReceipt:
    """Mint ``amount`` units of the configured token.  Reverts propagate."""
    request = TxRequest(
        "mintTokenPublic",
        (session.config.require_token(), amount, []),
        TxOptions(gas_limit=gas_limit),
    )
    receipt = session.executor.execute(session.hts_contract(), request)

    _report.tx(receipt, "Mint tx")
    new_supply = receipt.event_value("MintedToken", "newTotalSupply")
    if new_supply is not None:
        _report.field("New supply", new_supply)
    else:
        _report.hint("MintedToken event not found in receipt.")
    return receipt


@click.command()
@click.option("--amount", default=10, show_default=True,
              type=click.IntRange(min=1, max=INT64_MAX),
              help="Units to mint (smallest denomination)")
@click.option("--gas-limit", default=MINT_GAS_LIMIT, show_default=True,
              type=click.IntRange(min=1),
              help="Gas limit")
@click.pass_obj
def mint(session: Session, amount: int, gas_limit: int) -> None:
    """Mint new tokens to the treasury."""
    _report.heading("Mint HTS Fungible Token")
    _report.field("Account", session.executor.address)
    _report.field("Contract", session.config.require_contract())
    _report.field("Token", session.config.require_token())

    _report.step(f"Minting {amount} tokens to treasury")
    mint_to_treasury(session, amount, gas_limit)
    _report.success("Mint successful!")
