"""
Hedera Token Service structures.

Python mirrors of the IHederaTokenService structs accepted by the
CreateAndManageHTSTokens contract.  Each ``to_abi()`` returns the tuple
layout eth-abi expects for the matching ABI component.

Amounts are plain ``int``: negative for an outgoing leg, positive for an
incoming one.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

# Bounds of the Solidity integer types used by the token service
INT32_MAX = 2**31 - 1
INT64_MAX = 2**63 - 1
UINT256_MAX = 2**256 - 1


class KeyType(enum.IntFlag):
    """Key role bits (KeyHelper.sol)."""

    ADMIN = 1
    KYC = 2
    FREEZE = 4
    WIPE = 8
    SUPPLY = 16
    FEE = 32
    PAUSE = 64


class ResponseCode(enum.IntEnum):
    """Subset of Hedera response codes reported by the token service."""

    OK = 0
    INVALID_SIGNATURE = 7
    INSUFFICIENT_PAYER_BALANCE = 10
    INVALID_ACCOUNT_ID = 15
    SUCCESS = 22
    INSUFFICIENT_ACCOUNT_BALANCE = 28
    INVALID_TOKEN_ID = 167
    INSUFFICIENT_TOKEN_BALANCE = 178
    TOKEN_NOT_ASSOCIATED_TO_ACCOUNT = 184
    SPENDER_DOES_NOT_HAVE_ALLOWANCE = 292
    AMOUNT_EXCEEDS_ALLOWANCE = 293


def describe_response_code(code: int) -> str:
    try:
        return f"{int(code)} ({ResponseCode(int(code)).name})"
    except ValueError:
        return f"{int(code)} (UNKNOWN)"


def require_amount(value: Any, name: str = "amount") -> int:
    """Validate a token amount: an int, never a float or bool."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be an int, got {type(value).__name__}")
    return value


@dataclass(frozen=True)
class KeyValue:
    inherit_account_key: bool = False
    contract_id: str = ZERO_ADDRESS
    ed25519: bytes = b""
    ecdsa_secp256k1: bytes = b""
    delegatable_contract_id: str = ZERO_ADDRESS

    def to_abi(self) -> tuple:
        return (
            self.inherit_account_key,
            self.contract_id,
            self.ed25519,
            self.ecdsa_secp256k1,
            self.delegatable_contract_id,
        )


@dataclass(frozen=True)
class TokenKey:
    key_type: int
    key: KeyValue

    def to_abi(self) -> tuple:
        return (int(self.key_type), self.key.to_abi())


def contract_key(key_type: int, contract: str) -> TokenKey:
    """A key of ``key_type`` held by ``contract`` (contractId)."""
    return TokenKey(key_type=key_type, key=KeyValue(contract_id=contract))


@dataclass(frozen=True)
class AccountAmount:
    account: str
    amount: int
    is_approval: bool = False

    def __post_init__(self) -> None:
        require_amount(self.amount)

    def to_abi(self) -> tuple:
        return (self.account, self.amount, self.is_approval)


@dataclass(frozen=True)
class NftTransfer:
    sender: str
    receiver: str
    serial_number: int
    is_approval: bool = False

    def to_abi(self) -> tuple:
        return (self.sender, self.receiver, self.serial_number, self.is_approval)


@dataclass(frozen=True)
class TransferList:
    """HBAR legs of a cryptoTransfer."""

    transfers: tuple[AccountAmount, ...] = ()

    def to_abi(self) -> tuple:
        return ([t.to_abi() for t in self.transfers],)


@dataclass(frozen=True)
class TokenTransferList:
    token: str
    transfers: tuple[AccountAmount, ...] = ()
    nft_transfers: tuple[NftTransfer, ...] = field(default_factory=tuple)

    @property
    def net_amount(self) -> int:
        return sum(t.amount for t in self.transfers)

    def to_abi(self) -> tuple:
        return (
            self.token,
            [t.to_abi() for t in self.transfers],
            [n.to_abi() for n in self.nft_transfers],
        )


def token_transfer(token: str, sender: str, receiver: str, amount: int) -> TokenTransferList:
    """Two-leg fungible transfer: ``-amount`` from sender, ``+amount`` to receiver."""
    require_amount(amount)
    return TokenTransferList(
        token=token,
        transfers=(
            AccountAmount(account=sender, amount=-amount),
            AccountAmount(account=receiver, amount=amount),
        ),
    )
