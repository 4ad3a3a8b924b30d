"""
Theurgy Balance - Read token balances through the ERC-20 facade.

HTS token addresses answer ERC-20 view calls (balanceOf, decimals, symbol),
so no signing key is needed here.
"""

from __future__ import annotations

from decimal import Decimal

import click

from ..errors import ContractRevertError
from ..pneuma.executor import read_contract
from ..session import Session
from . import _report
from ._params import ADDRESS


def format_units(raw: int, decimals: int) -> str:
    """Human-readable amount without going through float."""
    if decimals <= 0:
        return str(raw)
    return f"{Decimal(raw).scaleb(-decimals):f}"


@click.command()
@click.option("--account", "accounts", type=ADDRESS, multiple=True,
              help="Extra account to query (repeatable)")
@click.pass_obj
def balance(session: Session, accounts: tuple[str, ...]) -> None:
    """Show token balances of the treasury and other accounts."""
    token = session.token_contract()

    symbol = "???"
    decimals = 0
    try:
        symbol = read_contract(session.client, token, "symbol") or symbol
        decimals = int(read_contract(session.client, token, "decimals") or 0)
    except ContractRevertError as exc:
        _report.hint(f"Could not read token metadata: {exc}")

    _report.heading(f"{symbol} Balances ({session.network.name})")
    _report.field("Token", token.address)
    _report.field("Decimals", decimals)
    click.echo()

    holders = [("Treasury", session.config.require_contract())]
    holders += [("Account", a) for a in accounts]
    for label, address in holders:
        raw = read_contract(session.client, token, "balanceOf", address) or 0
        _report.field(label, f"{address}  {format_units(raw, decimals)} {symbol}")
