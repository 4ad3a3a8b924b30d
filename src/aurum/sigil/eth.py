"""
ECDSA / secp256k1 Key Management for Aurum.

The operator key signs every contract call sent through the Hedera JSON-RPC
relay.  It is stored in ~/.aurum/.env as PRIVATE_KEY (hex format), next to
the deployed contract and token addresses.

Dependencies: eth-account (no full web3.py needed)
"""

from __future__ import annotations

import os
import secrets
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from eth_account import Account
from eth_account.signers.local import LocalAccount


# Default config directory
AURUM_DIR = Path.home() / ".aurum"
AURUM_ENV = AURUM_DIR / ".env"


def generate_eoa() -> tuple[str, str]:
    """
    Generate a new ECDSA/secp256k1 keypair (EOA).

    Returns:
        Tuple of (private_key_hex, address)
    """
    private_key = "0x" + secrets.token_hex(32)
    account = Account.from_key(private_key)
    return private_key, account.address


def read_env_file(env_path: Path) -> dict[str, str]:
    existing: dict[str, str] = {}
    if env_path.exists():
        for line in env_path.read_text(encoding="utf-8").splitlines():
            stripped = line.strip()
            if stripped and not stripped.startswith("#") and "=" in stripped:
                k, v = stripped.split("=", 1)
                existing[k.strip()] = v.strip()
    return existing


def save_env_value(key: str, value: str, env_path: Optional[Path] = None) -> Path:
    """
    Save a single key=value to the .env file (preserving other entries).

    The value is also injected into the current process environment.
    """
    env_path = env_path or AURUM_ENV
    env_path.parent.mkdir(parents=True, exist_ok=True)

    existing = read_env_file(env_path)
    existing[key] = value

    lines = [f"{k}={v}" for k, v in existing.items()]
    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")

    # Set secure permissions on Unix
    if os.name != "nt":
        env_path.chmod(0o600)

    os.environ[key] = value
    return env_path


def save_private_key(private_key: str, env_path: Optional[Path] = None) -> Path:
    return save_env_value("PRIVATE_KEY", private_key, env_path)


def load_env(env_path: Optional[Path] = None) -> Path:
    """Load the .env file into the process environment, if it exists.

    Values already present in the environment win.
    """
    env_path = env_path or AURUM_ENV
    if env_path.exists():
        load_dotenv(env_path, override=False)
    return env_path


def load_private_key(env_path: Optional[Path] = None) -> str:
    """
    Load private key from .env file or environment.

    Returns:
        0x-prefixed hex private key

    Raises:
        ValueError: If PRIVATE_KEY is not set
    """
    env_path = load_env(env_path)

    private_key = os.environ.get("PRIVATE_KEY")
    if not private_key:
        raise ValueError(
            f"PRIVATE_KEY not found. Set PRIVATE_KEY in {env_path} "
            "or in the environment."
        )

    if not private_key.startswith("0x"):
        private_key = "0x" + private_key

    return private_key


def get_account(private_key: Optional[str] = None) -> LocalAccount:
    """
    Get an eth-account LocalAccount from a private key.

    If private_key is None, it is loaded from .env.
    """
    if private_key is None:
        private_key = load_private_key()
    return Account.from_key(private_key)


def get_address(private_key: Optional[str] = None) -> str:
    """0x-prefixed checksummed address for a private key."""
    return get_account(private_key).address
