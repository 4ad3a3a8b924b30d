"""
JSON-RPC Client for the Hedera EVM relay.

Lightweight alternative to web3.py: uses httpx for HTTP + eth-abi for encoding.
Supports read-only contract calls, balance queries, raw transaction submission
and transaction receipt polling.
"""

from __future__ import annotations

import itertools
import logging
import time
from dataclasses import dataclass
from typing import Any, Optional

import httpx
from eth_hash.auto import keccak

from ..errors import ConfigError, ContractRevertError, NetworkError, ReceiptTimeoutError

logger = logging.getLogger(__name__)


def _keccak256(data: bytes) -> bytes:
    """Compute Keccak-256 hash (NOT the same as hashlib.sha3_256 / NIST SHA-3)."""
    return keccak(data)


@dataclass(frozen=True)
class Network:
    name: str
    rpc_url: str
    chain_id: int


NETWORKS: dict[str, Network] = {
    "mainnet": Network("mainnet", "https://mainnet.hashio.io/api", 295),
    "testnet": Network("testnet", "https://testnet.hashio.io/api", 296),
    "previewnet": Network("previewnet", "https://previewnet.hashio.io/api", 297),
    "local": Network("local", "http://localhost:7546", 298),
}

DEFAULT_NETWORK = "testnet"


def resolve_network(name: Optional[str] = None, rpc_url: Optional[str] = None) -> Network:
    """
    Select a network by name, optionally overriding its endpoint.

    Raises:
        ConfigError: If the name is unknown
    """
    key = (name or DEFAULT_NETWORK).lower()
    network = NETWORKS.get(key)
    if network is None:
        raise ConfigError(
            f"Unknown network '{name}'. Choose one of: {', '.join(sorted(NETWORKS))}"
        )
    if rpc_url:
        return Network(network.name, rpc_url, network.chain_id)
    return network


def _is_revert(error: dict[str, Any]) -> bool:
    message = str(error.get("message", "")).lower()
    return error.get("code") == 3 or "revert" in message


class RpcClient:
    """
    JSON-RPC connection to one network endpoint.

    Args:
        network: Target network
        http_client: Pre-built httpx client (e.g. with a mock transport)
        timeout: HTTP timeout in seconds
    """

    def __init__(
        self,
        network: Network,
        http_client: Optional[httpx.Client] = None,
        timeout: float = 30,
    ) -> None:
        self.network = network
        self._http = http_client or httpx.Client(timeout=timeout)
        self._ids = itertools.count(1)

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "RpcClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def call(self, method: str, params: list) -> Any:
        """
        Make a JSON-RPC call.

        Returns:
            Result field from the RPC response

        Raises:
            NetworkError: If the endpoint is unreachable or returns an error
            ContractRevertError: If the node reports an execution revert
        """
        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params,
            "id": next(self._ids),
        }
        logger.debug("rpc %s -> %s", method, self.network.rpc_url)

        try:
            response = self._http.post(self.network.rpc_url, json=payload)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as exc:
            raise NetworkError(f"RPC {method} failed: {exc}") from exc
        except ValueError as exc:
            raise NetworkError(f"RPC {method} returned invalid JSON: {exc}") from exc

        error = data.get("error")
        if error:
            if _is_revert(error):
                raise ContractRevertError(f"{method}: {error.get('message', error)}")
            raise NetworkError(f"RPC error: {error}")

        return data.get("result")

    def get_chain_id(self) -> int:
        return int(self.call("eth_chainId", []), 16)

    def get_nonce(self, address: str) -> int:
        """Current transaction count (nonce) for an address."""
        return int(self.call("eth_getTransactionCount", [address, "latest"]), 16)

    def get_gas_price(self) -> int:
        """Current gas price in weibars."""
        return int(self.call("eth_gasPrice", []), 16)

    def get_balance(self, address: str) -> int:
        return int(self.call("eth_getBalance", [address, "latest"]), 16)

    def eth_call(self, to: str, data: str) -> str:
        return self.call("eth_call", [{"to": to, "data": data}, "latest"])

    def send_raw_transaction(self, raw_tx: str) -> str:
        """
        Send a signed raw transaction.

        Returns:
            Transaction hash (0x-prefixed hex)
        """
        tx_hash = self.call("eth_sendRawTransaction", [raw_tx])
        if not tx_hash:
            raise NetworkError("eth_sendRawTransaction returned no transaction hash")
        return tx_hash

    def get_transaction_receipt(self, tx_hash: str) -> Optional[dict]:
        return self.call("eth_getTransactionReceipt", [tx_hash])

    def wait_for_receipt(
        self,
        tx_hash: str,
        timeout: float = 120,
        poll_interval: float = 2.0,
    ) -> dict:
        """
        Wait for a transaction receipt.

        Raises:
            ReceiptTimeoutError: If receipt not found within timeout
        """
        start = time.monotonic()
        while True:
            receipt = self.get_transaction_receipt(tx_hash)
            if receipt is not None:
                return receipt
            if time.monotonic() - start >= timeout:
                raise ReceiptTimeoutError(tx_hash, timeout)
            time.sleep(poll_interval)
