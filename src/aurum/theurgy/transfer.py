"""
Theurgy Transfer - Move fungible tokens out of the treasury.

Three contract paths, selected with --via:
- token:  transferTokenPublic(token, sender, receiver, amount)
- from:   approvePublic + transferFromPublic (ERC-20 style allowance)
- crypto: cryptoTransferPublic with a two-leg TokenTransferList
          (-amount for the treasury, +amount for the receiver)

By default the amount is minted to the treasury first, and the receiver is
a freshly generated EVM address with no Hedera account yet.

Also provides the standalone ``approve`` command.
"""

from __future__ import annotations

from typing import Optional

import click

from ..errors import ContractRevertError
from ..pneuma.executor import StepResult, TxOptions, TxRequest, recoverable
from ..pneuma.hts import INT64_MAX, UINT256_MAX, TransferList, token_transfer
from ..session import Session
from ..sigil.eth import generate_eoa
from . import _report
from ._params import ADDRESS
from .mint import MINT_GAS_LIMIT, mint_to_treasury

APPROVE_GAS_LIMIT = 800_000

TRANSFER_METHODS = {
    "token": ("transferTokenPublic", 1_500_000),
    "from": ("transferFromPublic", 2_000_000),
    "crypto": ("cryptoTransferPublic", 1_500_000),
}


def build_transfer_request(
    via: str,
    token: str,
    sender: str,
    receiver: str,
    amount: int,
    gas_limit: Optional[int] = None,
) -> TxRequest:
    """Contract call moving ``amount`` of ``token`` from sender to receiver."""
    method, default_gas = TRANSFER_METHODS[via]
    options = TxOptions(gas_limit=gas_limit or default_gas)

    if via == "crypto":
        # No HBAR legs, one fungible token list
        args = (
            TransferList().to_abi(),
            [token_transfer(token, sender, receiver, amount).to_abi()],
        )
    else:
        args = (token, sender, receiver, amount)
    return TxRequest(method, args, options)


def approve_spender(
    session: Session,
    spender: str,
    amount: int,
    gas_limit: int = APPROVE_GAS_LIMIT,
) -> StepResult:
    """approvePublic as a recoverable step."""
    request = TxRequest(
        "approvePublic",
        (session.config.require_token(), spender, amount),
        TxOptions(gas_limit=gas_limit),
    )
    with recoverable("approve") as result:
        result.receipt = session.executor.execute(session.hts_contract(), request)

    if result.ok:
        _report.tx(result.receipt, "Approve tx")
        _report.response_code(result.receipt)
        _report.success("Approval successful!")
    else:
        _report.failure(result, "Approval may have failed")
    return result


@click.command()
@click.option("--via", type=click.Choice(sorted(TRANSFER_METHODS)), default="token",
              show_default=True, help="Contract transfer method")
@click.option("--amount", default=10, show_default=True,
              type=click.IntRange(min=1, max=INT64_MAX),
              help="Units to transfer (smallest denomination)")
@click.option("--to", "recipient", type=ADDRESS, default=None,
              help="Receiver address (default: a fresh random address)")
@click.option("--mint/--no-mint", default=True, show_default=True,
              help="Mint the amount to the treasury first")
@click.option("--gas-limit", default=None, type=click.IntRange(min=1),
              help="Gas limit for the transfer call (default depends on --via)")
@click.option("--attempt-after-failed-approval", is_flag=True,
              help="With --via from: still call transferFromPublic when approval reverted")
@click.pass_context
def transfer(
    ctx: click.Context,
    via: str,
    amount: int,
    recipient: Optional[str],
    mint: bool,
    gas_limit: Optional[int],
    attempt_after_failed_approval: bool,
) -> None:
    """Mint to the treasury, then transfer to a receiver.

    \b
    Examples:
      aurum transfer
      aurum transfer --via crypto --amount 25
      aurum transfer --via from --to 0xAbc... --no-mint
    """
    session: Session = ctx.obj
    method, _ = TRANSFER_METHODS[via]
    contract_address = session.config.require_contract()
    token = session.config.require_token()

    _report.heading(f"Mint & Transfer using {method}")
    _report.field("Account", session.executor.address)
    _report.field("Contract", contract_address)
    _report.field("Token", token)

    if recipient is None:
        _, recipient = generate_eoa()
        _report.field("Random receiver", recipient)

    steps = 1 + int(mint) + int(via == "from")
    current = 0

    if mint:
        current += 1
        _report.step(f"Step {current}/{steps}: Minting {amount} tokens to treasury")
        mint_to_treasury(session, amount, MINT_GAS_LIMIT)

    if via == "from":
        current += 1
        _report.step(f"Step {current}/{steps}: Approving {amount} tokens for spending")
        approval = approve_spender(session, contract_address, amount)
        if not approval.ok and not attempt_after_failed_approval:
            _report.hint("Skipping transferFromPublic: it depends on the approval.")
            ctx.exit(ContractRevertError.exit_code)

    current += 1
    _report.step(f"Step {current}/{steps}: Transferring {amount} tokens using {method}")
    _report.field("From (treasury)", contract_address)
    _report.field("To", recipient)

    request = build_transfer_request(via, token, contract_address, recipient, amount, gas_limit)
    with recoverable(method) as result:
        result.receipt = session.executor.execute(session.hts_contract(), request)

    if not result.ok:
        _report.failure(result, f"{method} failed!")
        ctx.exit(ContractRevertError.exit_code)

    _report.tx(result.receipt, "Transfer tx")
    _report.success(f"{method} successful!")
    _report.response_code(result.receipt)


@click.command()
@click.option("--spender", type=ADDRESS, default=None,
              help="Spender address (default: the contract)")
@click.option("--amount", default=10, show_default=True,
              type=click.IntRange(min=0, max=UINT256_MAX),
              help="Allowance (smallest denomination)")
@click.option("--gas-limit", default=APPROVE_GAS_LIMIT, show_default=True,
              type=click.IntRange(min=1),
              help="Gas limit")
@click.pass_context
def approve(ctx: click.Context, spender: Optional[str], amount: int, gas_limit: int) -> None:
    """Approve a spender for the treasury's tokens."""
    session: Session = ctx.obj
    spender = spender or session.config.require_contract()

    _report.heading("Approve HTS Token Allowance")
    _report.field("Token", session.config.require_token())
    _report.field("Spender", spender)
    _report.field("Amount", amount)

    result = approve_spender(session, spender, amount, gas_limit)
    if not result.ok:
        ctx.exit(ContractRevertError.exit_code)
