"""Console reporting shared by the commands."""

from __future__ import annotations

from typing import Any, Optional

import click

from ..pneuma.executor import StepResult, TxReceipt
from ..pneuma.hts import describe_response_code


def heading(title: str, width: int = 60) -> None:
    click.echo()
    click.secho("=" * width, fg="cyan")
    click.secho(f"  {title}", fg="bright_white", bold=True)
    click.secho("=" * width, fg="cyan")


def step(title: str) -> None:
    click.echo()
    click.secho(f"--- {title} ---", fg="bright_white")


def field(label: str, value: Any) -> None:
    click.echo(click.style(f"  {label + ':':<16}", dim=True) + str(value))


def tx(receipt: TxReceipt, label: str = "TX") -> None:
    field(label, receipt.tx_hash)


def response_code(receipt: TxReceipt) -> Optional[int]:
    """Print the ResponseCode event, if any, and return the code."""
    code = receipt.event_value("ResponseCode", "responseCode")
    if code is None:
        click.secho("  No ResponseCode event in receipt.", fg="yellow")
        return None
    field("Response code", describe_response_code(code))
    return int(code)


def success(message: str) -> None:
    click.secho(f"  {message}", fg="green", bold=True)


def failure(result: StepResult, message: Optional[str] = None) -> None:
    click.secho(f"  {message or result.name + ' failed!'}", fg="red")
    if result.error is not None:
        click.echo(click.style("  Error: ", dim=True) + str(result.error))


def hint(message: str) -> None:
    click.secho(f"  {message}", fg="yellow")
