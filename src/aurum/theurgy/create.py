"""
Theurgy Create - Create an HTS fungible token through the contract.

The contract is the treasury and holds both the ADMIN and SUPPLY keys, so
later mints go through the same contract.  HBAR is attached to pay the
token-service creation fee.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Optional

import click

from ..config import TOKEN_KEY, parse_hbar
from ..pneuma.executor import TxOptions, TxRequest
from ..pneuma.hts import INT32_MAX, INT64_MAX, KeyType, contract_key
from ..session import Session
from ..sigil.eth import save_env_value
from . import _report
from ._params import ADDRESS

CREATE_GAS_LIMIT = 200_000


def _hbar(ctx: click.Context, param: click.Parameter, value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    try:
        parse_hbar(value)
    except ValueError as exc:
        raise click.BadParameter(str(exc)) from None
    return value


@click.command()
@click.option("--name", default=None, help="Token name (default: TOKEN_NAME)")
@click.option("--symbol", default=None, help="Token symbol (default: TOKEN_SYMBOL)")
@click.option("--memo", default=None, help="Token memo (default: TOKEN_MEMO)")
@click.option("--initial-supply", type=click.IntRange(min=0, max=INT64_MAX), default=None,
              help="Initial supply (default: TOKEN_INITIAL_SUPPLY)")
@click.option("--max-supply", type=click.IntRange(min=0, max=INT64_MAX), default=None,
              help="Max supply (default: TOKEN_MAX_SUPPLY)")
@click.option("--decimals", type=click.IntRange(min=0, max=INT32_MAX), default=None,
              help="Decimals (default: TOKEN_DECIMALS)")
@click.option("--freeze-default/--no-freeze-default", default=None,
              help="Freeze new accounts by default (default: TOKEN_FREEZE_DEFAULT)")
@click.option("--hbar", "hbar_to_send", default=None, callback=_hbar,
              help="HBAR attached for the creation fee (default: TOKEN_HBAR_TO_SEND)")
@click.option("--treasury", type=ADDRESS, default=None,
              help="Treasury address (default: the contract)")
@click.option("--gas-limit", default=CREATE_GAS_LIMIT, show_default=True,
              type=click.IntRange(min=1),
              help="Gas limit")
@click.option("--save/--no-save", default=True, show_default=True,
              help=f"Write {TOKEN_KEY} to the config file")
@click.pass_obj
def create(
    session: Session,
    name: Optional[str],
    symbol: Optional[str],
    memo: Optional[str],
    initial_supply: Optional[int],
    max_supply: Optional[int],
    decimals: Optional[int],
    freeze_default: Optional[bool],
    hbar_to_send: Optional[str],
    treasury: Optional[str],
    gas_limit: int,
    save: bool,
) -> None:
    """Create an HTS fungible token.

    Parameters default to the TOKEN_* values of the config file.

    \b
    Examples:
      aurum create
      aurum create --name Gold --symbol GLD --initial-supply 500 --hbar 15
    """
    contract_address = session.config.require_contract()
    overrides = {
        "name": name,
        "symbol": symbol,
        "memo": memo,
        "initial_supply": initial_supply,
        "max_supply": max_supply,
        "decimals": decimals,
        "freeze_default": freeze_default,
        "hbar_to_send": hbar_to_send,
    }
    params = replace(
        session.config.token, **{k: v for k, v in overrides.items() if v is not None}
    )
    treasury = treasury or contract_address

    _report.heading("Creating HTS Fungible Token")
    _report.field("Account", session.executor.address)
    _report.field("Contract", contract_address)

    _report.step("Token Parameters")
    _report.field("Name", params.name)
    _report.field("Symbol", params.symbol)
    _report.field("Memo", params.memo)
    _report.field("Initial supply", params.initial_supply)
    _report.field("Max supply", params.max_supply)
    _report.field("Decimals", params.decimals)
    _report.field("Freeze default", params.freeze_default)
    _report.field("Treasury", treasury)
    _report.field("HBAR to send", params.hbar_to_send)

    keys = [
        contract_key(KeyType.ADMIN, contract_address),
        contract_key(KeyType.SUPPLY, contract_address),
    ]
    request = TxRequest(
        "createFungibleTokenPublic",
        (
            params.name,
            params.symbol,
            params.memo,
            params.initial_supply,
            params.max_supply,
            params.decimals,
            params.freeze_default,
            treasury,
            [k.to_abi() for k in keys],
        ),
        TxOptions(gas_limit=gas_limit, value=params.value_weibars),
    )

    click.echo()
    click.echo("  Creating token...")
    receipt = session.executor.execute(session.hts_contract(), request)
    _report.tx(receipt)

    _report.step("Token Creation Complete")
    token_address = receipt.event_value("CreatedToken", "tokenAddress")
    if token_address is None:
        _report.hint(f"CreatedToken event not found. Check transaction {receipt.tx_hash}")
        return

    _report.field("Token address", token_address)
    if save:
        path = save_env_value(TOKEN_KEY, token_address, session.config.env_path)
        _report.field("Saved to", path)
    else:
        _report.hint(f"Set {TOKEN_KEY}={token_address} before minting.")
