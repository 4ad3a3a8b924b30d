"""
Error hierarchy for Aurum.

Two tiers:
- fatal errors (configuration, network, receipt timeout) propagate to the
  CLI boundary and terminate the process with ``exit_code``;
- ``ContractRevertError`` is recoverable: command steps wrapped in
  ``aurum.pneuma.executor.recoverable`` report it and carry on.
"""

from __future__ import annotations

from typing import Any, Optional


class AurumError(RuntimeError):
    exit_code: int = 1


class ConfigError(AurumError):
    exit_code = 2


class NetworkError(AurumError):
    exit_code = 3


class ReceiptTimeoutError(NetworkError):
    exit_code = 4

    def __init__(self, tx_hash: str, timeout: float) -> None:
        super().__init__(f"Transaction {tx_hash} not confirmed within {timeout}s")
        self.tx_hash = tx_hash
        self.timeout = timeout


class ContractRevertError(AurumError):
    exit_code = 5

    def __init__(
        self,
        message: str,
        tx_hash: Optional[str] = None,
        receipt: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.tx_hash = tx_hash
        self.receipt = receipt
