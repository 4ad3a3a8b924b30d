__all__ = [
    # Errors
    "AurumError",
    "ConfigError",
    "NetworkError",
    "ReceiptTimeoutError",
    "ContractRevertError",
    # Configuration
    "AurumConfig",
    "TokenParams",
    "parse_hbar",
    # Network
    "Network",
    "RpcClient",
    "resolve_network",
    # Executor
    "Contract",
    "TxOptions",
    "TxRequest",
    "TxReceipt",
    "TransactionExecutor",
    "StepResult",
    "recoverable",
    "read_contract",
    # Events
    "Event",
    "decode_logs",
    "find_event",
    # Token service structures
    "AccountAmount",
    "KeyType",
    "KeyValue",
    "NftTransfer",
    "ResponseCode",
    "TokenKey",
    "TokenTransferList",
    "TransferList",
    "contract_key",
    "token_transfer",
]

from .config import AurumConfig, TokenParams, parse_hbar
from .errors import (
    AurumError,
    ConfigError,
    ContractRevertError,
    NetworkError,
    ReceiptTimeoutError,
)
from .pneuma.events import Event, decode_logs, find_event
from .pneuma.executor import (
    Contract,
    StepResult,
    TransactionExecutor,
    TxOptions,
    TxReceipt,
    TxRequest,
    read_contract,
    recoverable,
)
from .pneuma.hts import (
    AccountAmount,
    KeyType,
    KeyValue,
    NftTransfer,
    ResponseCode,
    TokenKey,
    TokenTransferList,
    TransferList,
    contract_key,
    token_transfer,
)
from .pneuma.rpc import Network, RpcClient, resolve_network
