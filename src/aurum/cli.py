"""
Aurum CLI

Command-line interface for the CreateAndManageHTSTokens contract on Hedera.

Commands:
  deploy    - Deploy the contract
  create    - Create an HTS fungible token (contract as treasury)
  mint      - Mint tokens to the treasury
  approve   - Approve a spender
  transfer  - Mint, then transfer via transferToken / transferFrom / cryptoTransfer
  balance   - Read token balances
  whoami    - Show the operator address
  info      - Show network and configuration
"""

from __future__ import annotations

import logging
import sys
from dataclasses import replace
from typing import Any, Optional

import click

from .config import AurumConfig
from .errors import AurumError
from .pneuma.rpc import NETWORKS
from .session import Session
from .sigil.eth import get_address, load_private_key


# ============ Constants ============

VERSION = "0.3.0"


class AurumGroup(click.Group):
    """Command group that turns fatal AurumErrors into exit codes."""

    def invoke(self, ctx: click.Context) -> Any:
        try:
            return super().invoke(ctx)
        except AurumError as exc:
            click.secho(f"ERROR: {exc}", fg="red")
            ctx.exit(exc.exit_code)


# ============ Main CLI Group ============


@click.group(cls=AurumGroup)
@click.version_option(version=VERSION, prog_name="aurum")
@click.option("--network", type=click.Choice(sorted(NETWORKS)), default=None,
              help="Network name (default: AURUM_NETWORK or testnet)")
@click.option("--rpc-url", default=None, help="JSON-RPC endpoint (default: HEDERA_RPC_URL)")
@click.option("--verbose", "-v", is_flag=True, help="Log RPC and transaction details")
@click.pass_context
def cli(ctx: click.Context, network: Optional[str], rpc_url: Optional[str], verbose: bool) -> None:
    """Aurum — HTS token management through CreateAndManageHTSTokens."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.ERROR,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if ctx.obj is not None:
        return

    config = AurumConfig.load()
    if network:
        config = replace(config, network=network)
    if rpc_url:
        config = replace(config, rpc_url=rpc_url)

    session = Session(config)
    ctx.obj = session
    ctx.call_on_close(session.close)


# ============ Commands ============

from .theurgy.balance import balance
from .theurgy.create import create
from .theurgy.deploy import deploy
from .theurgy.mint import mint
from .theurgy.transfer import approve, transfer

cli.add_command(deploy)
cli.add_command(create)
cli.add_command(mint)
cli.add_command(approve)
cli.add_command(transfer)
cli.add_command(balance)


@cli.command()
@click.pass_obj
def whoami(session: Session) -> None:
    """Show the operator address."""
    try:
        address = get_address(load_private_key(session.config.env_path))
    except ValueError:
        click.echo("No operator key found.")
        click.echo("Set PRIVATE_KEY in ~/.aurum/.env or the environment.")
        sys.exit(1)
    click.echo(f"Address: {address}")


@cli.command()
@click.pass_obj
def info(session: Session) -> None:
    """Show network and configuration."""
    config = session.config
    token = config.token

    click.echo()
    click.echo(
        click.style("  ◆ ", fg="cyan")
        + click.style("A U R U M", fg="bright_white", bold=True)
        + click.style(f"  v{VERSION}", dim=True)
    )
    click.echo()

    rows = [
        ("Network", f"{session.network.name} (chain {session.network.chain_id})"),
        ("RPC", session.network.rpc_url),
        ("Contract", config.contract_address or click.style("not deployed", fg="yellow")),
        ("Token", config.token_address or click.style("not created", fg="yellow")),
        ("Config", config.env_path),
    ]
    for label, value in rows:
        click.echo(click.style(f"  {label + ':':<13}", dim=True) + str(value))

    click.echo()
    click.secho("  Token defaults ─────────────────────────", fg="cyan")
    click.echo(f"  {token.name} ({token.symbol}) — {token.memo}")
    click.echo(
        f"  supply {token.initial_supply}/{token.max_supply}, "
        f"decimals {token.decimals}, freeze default {token.freeze_default}, "
        f"{token.hbar_to_send} HBAR attached"
    )
    click.echo()


# ============ Entry Points ============


def main() -> None:
    """Aurum CLI entry point."""
    cli()


if __name__ == "__main__":
    main()
