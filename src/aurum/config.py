"""
Configuration - deployed addresses and default token parameters.

Values come from the process environment, falling back to ~/.aurum/.env.
Addresses produced by ``aurum deploy`` and ``aurum create`` are written back
to the same file.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation, localcontext
from pathlib import Path
from typing import Mapping, Optional

from .errors import ConfigError
from .pneuma.rpc import DEFAULT_NETWORK
from .sigil import eth

WEIBARS_PER_HBAR = 10**18

CONTRACT_KEY = "HTS_CONTRACT_ADDRESS"
TOKEN_KEY = "FUNGIBLE_TOKEN_ADDRESS"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def parse_hbar(text: str) -> int:
    """
    Convert a decimal HBAR amount ("10", "0.5") to weibars.

    Raises:
        ValueError: If the text is not a non-negative decimal with at most
            18 fractional digits
    """
    try:
        amount = Decimal(str(text).strip())
    except InvalidOperation:
        raise ValueError(f"Invalid HBAR amount: {text!r}") from None

    if not amount.is_finite() or amount < 0:
        raise ValueError(f"Invalid HBAR amount: {text!r}")

    with localcontext() as ctx:
        ctx.prec = 80
        scaled = amount * WEIBARS_PER_HBAR
    if scaled != scaled.to_integral_value():
        raise ValueError(f"HBAR amount has more than 18 decimals: {text!r}")
    return int(scaled)


def _int(env: Mapping[str, str], key: str, default: int) -> int:
    raw = env.get(key)
    if raw is None or raw == "":
        return default
    try:
        return int(raw.replace("_", ""))
    except ValueError:
        raise ConfigError(f"{key} must be an integer, got {raw!r}") from None


def _bool(env: Mapping[str, str], key: str, default: bool) -> bool:
    raw = env.get(key)
    if raw is None or raw == "":
        return default
    if raw.lower() in _TRUE:
        return True
    if raw.lower() in _FALSE:
        return False
    raise ConfigError(f"{key} must be true or false, got {raw!r}")


@dataclass(frozen=True)
class TokenParams:
    """Default createFungibleTokenPublic parameters."""

    name: str = "MyFungibleToken"
    symbol: str = "MFT"
    memo: str = "My HTS fungible token"
    initial_supply: int = 1_000_000
    max_supply: int = 10_000_000
    decimals: int = 0
    freeze_default: bool = False
    hbar_to_send: str = "10"

    @property
    def value_weibars(self) -> int:
        return parse_hbar(self.hbar_to_send)

    @classmethod
    def from_env(cls, env: Mapping[str, str]) -> "TokenParams":
        defaults = cls()
        params = cls(
            name=env.get("TOKEN_NAME") or defaults.name,
            symbol=env.get("TOKEN_SYMBOL") or defaults.symbol,
            memo=env.get("TOKEN_MEMO") or defaults.memo,
            initial_supply=_int(env, "TOKEN_INITIAL_SUPPLY", defaults.initial_supply),
            max_supply=_int(env, "TOKEN_MAX_SUPPLY", defaults.max_supply),
            decimals=_int(env, "TOKEN_DECIMALS", defaults.decimals),
            freeze_default=_bool(env, "TOKEN_FREEZE_DEFAULT", defaults.freeze_default),
            hbar_to_send=env.get("TOKEN_HBAR_TO_SEND") or defaults.hbar_to_send,
        )
        try:
            parse_hbar(params.hbar_to_send)
        except ValueError as exc:
            raise ConfigError(f"TOKEN_HBAR_TO_SEND: {exc}") from None
        return params


@dataclass(frozen=True)
class AurumConfig:
    network: str = DEFAULT_NETWORK
    rpc_url: Optional[str] = None
    contract_address: Optional[str] = None
    token_address: Optional[str] = None
    token: TokenParams = field(default_factory=TokenParams)
    env_path: Optional[Path] = None

    @classmethod
    def load(cls, env_path: Optional[Path] = None) -> "AurumConfig":
        """Load configuration from ~/.aurum/.env and the environment."""
        env_path = eth.load_env(env_path)
        env = os.environ
        return cls(
            network=env.get("AURUM_NETWORK") or DEFAULT_NETWORK,
            rpc_url=env.get("HEDERA_RPC_URL") or None,
            contract_address=env.get(CONTRACT_KEY) or None,
            token_address=env.get(TOKEN_KEY) or None,
            token=TokenParams.from_env(env),
            env_path=env_path,
        )

    def require_contract(self) -> str:
        if not self.contract_address:
            raise ConfigError(
                f"{CONTRACT_KEY} not set. Run 'aurum deploy' first, "
                f"or set {CONTRACT_KEY} in {self.env_path or eth.AURUM_ENV}."
            )
        return self.contract_address

    def require_token(self) -> str:
        if not self.token_address:
            raise ConfigError(
                f"{TOKEN_KEY} not set. Run 'aurum create' first, "
                f"or set {TOKEN_KEY} in {self.env_path or eth.AURUM_ENV}."
            )
        return self.token_address
