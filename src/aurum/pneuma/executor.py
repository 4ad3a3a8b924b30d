"""
Transaction Executor - Submit one contract call and read its events.

Every command goes through the same sequence:
    build -> sign -> send -> wait for receipt -> decode logs -> find event

Exactly one transaction is in flight at a time.  Nothing is retried.

Failure tiers:
- NetworkError / ReceiptTimeoutError: fatal, propagate to the CLI.
- ContractRevertError: recoverable, callers wrap steps in ``recoverable()``.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator, Mapping, Optional

from eth_abi import decode
from eth_abi.exceptions import DecodingError
from eth_account.signers.local import LocalAccount

from ..errors import ContractRevertError
from .abi import ERC20_ABI, decode_result, encode_call
from .events import Event, decode_logs, find_event
from .hts import require_amount
from .rpc import RpcClient, _keccak256

logger = logging.getLogger(__name__)

DEFAULT_GAS_LIMIT = 500_000
DEFAULT_DEPLOY_GAS_LIMIT = 3_000_000

# Error(string) selector
_ERROR_SELECTOR = "08c379a0"


def to_checksum_address(address: str) -> str:
    """Convert an address to EIP-55 checksummed format.

    eth-account requires checksummed addresses in transaction fields.
    """
    addr = address.lower().replace("0x", "")
    addr_hash = _keccak256(addr.encode("utf-8")).hex()
    result = "0x"
    for i, c in enumerate(addr):
        if c in "abcdef":
            result += c.upper() if int(addr_hash[i], 16) >= 8 else c
        else:
            result += c
    return result


@dataclass(frozen=True)
class Contract:
    """Pointer to a deployed contract: address plus call interface."""

    address: str
    abi: tuple[dict[str, Any], ...]
    name: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "abi", tuple(self.abi))


@dataclass(frozen=True)
class TxOptions:
    gas_limit: int = DEFAULT_GAS_LIMIT
    value: int = 0

    def __post_init__(self) -> None:
        require_amount(self.gas_limit, "gas_limit")
        require_amount(self.value, "value")
        if self.gas_limit <= 0:
            raise ValueError("gas_limit must be positive")
        if self.value < 0:
            raise ValueError("value must not be negative")


@dataclass(frozen=True)
class TxRequest:
    """One contract call, immutable once built."""

    method: str
    args: tuple = ()
    options: TxOptions = field(default_factory=TxOptions)

    def __post_init__(self) -> None:
        object.__setattr__(self, "args", tuple(self.args))


@dataclass(frozen=True)
class TxReceipt:
    tx_hash: str
    status: int
    events: tuple[Event, ...] = ()
    block_number: Optional[int] = None
    gas_used: Optional[int] = None
    contract_address: Optional[str] = None
    raw: Mapping[str, Any] = field(default_factory=dict, repr=False)

    @property
    def succeeded(self) -> bool:
        return self.status == 1

    def find_event(self, name: str) -> Optional[Event]:
        return find_event(self.events, name)

    def event_value(self, name: str, field_name: str) -> Any:
        """Field of the first ``name`` event, or None if there is no such event."""
        event = self.find_event(name)
        if event is None:
            return None
        return event.get(field_name)


def _hex_int(value: Any) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, int):
        return value
    return int(value, 16)


def revert_reason(receipt: Mapping[str, Any]) -> Optional[str]:
    """Decode ``revertReason`` (Hedera relay receipts) when it is Error(string)."""
    raw = receipt.get("revertReason")
    if not raw:
        return None
    data = raw.removeprefix("0x")
    if data.startswith(_ERROR_SELECTOR):
        try:
            return decode(["string"], bytes.fromhex(data[8:]))[0]
        except DecodingError:
            return raw
    try:
        # Some relays return the reason as hex-encoded text
        text = bytes.fromhex(data).decode("utf-8")
    except (ValueError, UnicodeDecodeError):
        return raw
    return text if text.isprintable() else raw


def read_contract(client: RpcClient, contract: Contract, method: str, *args: Any) -> Any:
    """Read-only call (eth_call); no transaction is sent and no key is needed."""
    abi = list(contract.abi)
    result = client.eth_call(contract.address, encode_call(abi, method, args))
    return decode_result(abi, method, result)


class TransactionExecutor:
    """
    Submits contract calls from one signing account.

    Args:
        client: JSON-RPC connection
        account: Signing account
        event_abis: Extra ABIs whose events are decoded from every receipt
            (the target contract's own ABI is always included)
        receipt_timeout: Seconds to wait for a receipt
        poll_interval: Seconds between receipt polls
    """

    def __init__(
        self,
        client: RpcClient,
        account: LocalAccount,
        event_abis: Iterable[list[dict[str, Any]]] = (ERC20_ABI,),
        receipt_timeout: float = 120,
        poll_interval: float = 2.0,
    ) -> None:
        self.client = client
        self.account = account
        self.event_abis = tuple(event_abis)
        self.receipt_timeout = receipt_timeout
        self.poll_interval = poll_interval

    @property
    def address(self) -> str:
        return self.account.address

    def _base_tx(self, options: TxOptions) -> dict[str, Any]:
        return {
            "value": options.value,
            "nonce": self.client.get_nonce(self.account.address),
            "gas": options.gas_limit,
            "gasPrice": self.client.get_gas_price(),
            "chainId": self.client.network.chain_id,
        }

    def build(self, contract: Contract, request: TxRequest) -> dict[str, Any]:
        """Build the unsigned transaction for a contract call."""
        calldata = encode_call(list(contract.abi), request.method, request.args)
        tx = self._base_tx(request.options)
        tx["to"] = to_checksum_address(contract.address)
        tx["data"] = calldata
        return tx

    def _sign_and_send(self, tx: dict[str, Any]) -> str:
        signed = self.account.sign_transaction(tx)
        raw_tx = "0x" + signed.raw_transaction.hex().removeprefix("0x")
        tx_hash = self.client.send_raw_transaction(raw_tx)
        logger.debug("sent %s (nonce %s)", tx_hash, tx["nonce"])
        return tx_hash

    def _await(self, tx_hash: str, abis: Iterable[list[dict[str, Any]]], label: str) -> TxReceipt:
        raw = self.client.wait_for_receipt(
            tx_hash, timeout=self.receipt_timeout, poll_interval=self.poll_interval
        )
        status = _hex_int(raw.get("status")) or 0
        receipt = TxReceipt(
            tx_hash=tx_hash,
            status=status,
            events=decode_logs(abis, raw.get("logs") or []),
            block_number=_hex_int(raw.get("blockNumber")),
            gas_used=_hex_int(raw.get("gasUsed")),
            contract_address=raw.get("contractAddress"),
            raw=raw,
        )
        logger.debug("receipt %s status=%s events=%s", tx_hash, status,
                     [e.name for e in receipt.events])

        if not receipt.succeeded:
            reason = revert_reason(raw)
            message = f"{label} reverted (tx {tx_hash})"
            if reason:
                message += f": {reason}"
            raise ContractRevertError(message, tx_hash=tx_hash, receipt=raw)
        return receipt

    def execute(self, contract: Contract, request: TxRequest) -> TxReceipt:
        """
        Submit ``request`` against ``contract`` and wait for its receipt.

        Returns:
            Receipt with decoded events

        Raises:
            ContractRevertError: Execution reverted (recoverable)
            NetworkError: Submission failed (fatal)
            ReceiptTimeoutError: No receipt within the timeout (fatal)
        """
        tx = self.build(contract, request)
        logger.info("%s.%s gas=%d value=%d", contract.name or contract.address,
                    request.method, request.options.gas_limit, request.options.value)
        try:
            tx_hash = self._sign_and_send(tx)
        except ContractRevertError as exc:
            raise ContractRevertError(f"{request.method}: {exc}") from exc
        return self._await(tx_hash, (list(contract.abi), *self.event_abis), request.method)

    def read(self, contract: Contract, method: str, *args: Any) -> Any:
        return read_contract(self.client, contract, method, *args)

    def deploy(self, bytecode: str, gas_limit: int = DEFAULT_DEPLOY_GAS_LIMIT) -> TxReceipt:
        """
        Deploy contract creation bytecode.

        The deployed address is in ``receipt.contract_address``.
        """
        tx = self._base_tx(TxOptions(gas_limit=gas_limit))
        tx["data"] = bytecode if bytecode.startswith("0x") else "0x" + bytecode
        tx_hash = self._sign_and_send(tx)
        return self._await(tx_hash, self.event_abis, "deployment")


@dataclass
class StepResult:
    """Outcome of one recoverable step."""

    name: str
    receipt: Optional[TxReceipt] = None
    error: Optional[ContractRevertError] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.receipt is not None


@contextmanager
def recoverable(name: str) -> Iterator[StepResult]:
    """
    Scope in which a contract revert is reported instead of raised.

    Only ContractRevertError is caught; network failures and timeouts
    propagate.

        with recoverable("approve") as step:
            step.receipt = executor.execute(contract, request)
        if not step.ok:
            ...
    """
    result = StepResult(name)
    try:
        yield result
    except ContractRevertError as exc:
        result.error = exc
        logger.warning("%s failed: %s", name, exc)
