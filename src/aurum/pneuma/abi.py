"""
ABI Loader - Contract ABIs, Hardhat artifacts and call encoding.

The CreateAndManageHTSTokens ABI is bundled so that commands work against an
already deployed contract without a local build.  Deployment bytecode comes
from Hardhat compilation artifacts
(artifacts/contracts/<Name>.sol/<Name>.json).
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Optional

from eth_abi import decode, encode

from .rpc import _keccak256

HTS_CONTRACT_NAME = "CreateAndManageHTSTokens"


def _param(name: str, type_: str, components: Optional[list] = None) -> dict[str, Any]:
    param: dict[str, Any] = {"name": name, "type": type_}
    if components is not None:
        param["components"] = components
    return param


# IHederaTokenService structs
_KEY_VALUE = [
    _param("inheritAccountKey", "bool"),
    _param("contractId", "address"),
    _param("ed25519", "bytes"),
    _param("ECDSA_secp256k1", "bytes"),
    _param("delegatableContractId", "address"),
]
_TOKEN_KEY = [
    _param("keyType", "uint256"),
    _param("key", "tuple", _KEY_VALUE),
]
_ACCOUNT_AMOUNT = [
    _param("accountID", "address"),
    _param("amount", "int64"),
    _param("isApproval", "bool"),
]
_NFT_TRANSFER = [
    _param("senderAccountID", "address"),
    _param("receiverAccountID", "address"),
    _param("serialNumber", "int64"),
    _param("isApproval", "bool"),
]
_TRANSFER_LIST = [
    _param("transfers", "tuple[]", _ACCOUNT_AMOUNT),
]
_TOKEN_TRANSFER_LIST = [
    _param("token", "address"),
    _param("transfers", "tuple[]", _ACCOUNT_AMOUNT),
    _param("nftTransfers", "tuple[]", _NFT_TRANSFER),
]

_RESPONSE_CODE_OUT = [_param("responseCode", "int256")]

HTS_CONTRACT_ABI: list[dict[str, Any]] = [
    {
        "type": "function",
        "name": "createFungibleTokenPublic",
        "inputs": [
            _param("name", "string"),
            _param("symbol", "string"),
            _param("memo", "string"),
            _param("initialTotalSupply", "int64"),
            _param("maxSupply", "int64"),
            _param("decimals", "int32"),
            _param("freezeDefaultStatus", "bool"),
            _param("treasury", "address"),
            _param("keys", "tuple[]", _TOKEN_KEY),
        ],
        "outputs": [],
        "stateMutability": "payable",
    },
    {
        "type": "function",
        "name": "mintTokenPublic",
        "inputs": [
            _param("token", "address"),
            _param("amount", "int64"),
            _param("metadata", "bytes[]"),
        ],
        "outputs": [
            _param("responseCode", "int256"),
            _param("newTotalSupply", "int64"),
            _param("serialNumbers", "int64[]"),
        ],
        "stateMutability": "nonpayable",
    },
    {
        "type": "function",
        "name": "transferTokenPublic",
        "inputs": [
            _param("token", "address"),
            _param("sender", "address"),
            _param("receiver", "address"),
            _param("amount", "int64"),
        ],
        "outputs": _RESPONSE_CODE_OUT,
        "stateMutability": "nonpayable",
    },
    {
        "type": "function",
        "name": "transferFromPublic",
        "inputs": [
            _param("token", "address"),
            _param("from", "address"),
            _param("to", "address"),
            _param("amount", "uint256"),
        ],
        "outputs": [_param("responseCode", "int64")],
        "stateMutability": "nonpayable",
    },
    {
        "type": "function",
        "name": "cryptoTransferPublic",
        "inputs": [
            _param("transferList", "tuple", _TRANSFER_LIST),
            _param("tokenTransfers", "tuple[]", _TOKEN_TRANSFER_LIST),
        ],
        "outputs": _RESPONSE_CODE_OUT,
        "stateMutability": "nonpayable",
    },
    {
        "type": "function",
        "name": "approvePublic",
        "inputs": [
            _param("token", "address"),
            _param("spender", "address"),
            _param("amount", "uint256"),
        ],
        "outputs": _RESPONSE_CODE_OUT,
        "stateMutability": "nonpayable",
    },
    {
        "type": "event",
        "name": "ResponseCode",
        "inputs": [dict(_param("responseCode", "int256"), indexed=False)],
        "anonymous": False,
    },
    {
        "type": "event",
        "name": "CreatedToken",
        "inputs": [dict(_param("tokenAddress", "address"), indexed=False)],
        "anonymous": False,
    },
    {
        "type": "event",
        "name": "MintedToken",
        "inputs": [
            dict(_param("newTotalSupply", "int64"), indexed=False),
            dict(_param("serialNumbers", "int64[]"), indexed=False),
        ],
        "anonymous": False,
    },
]

# ERC-20 facade exposed by HTS token addresses
ERC20_ABI: list[dict[str, Any]] = [
    {
        "type": "function",
        "name": "balanceOf",
        "inputs": [_param("account", "address")],
        "outputs": [_param("", "uint256")],
        "stateMutability": "view",
    },
    {
        "type": "function",
        "name": "totalSupply",
        "inputs": [],
        "outputs": [_param("", "uint256")],
        "stateMutability": "view",
    },
    {
        "type": "function",
        "name": "decimals",
        "inputs": [],
        "outputs": [_param("", "uint8")],
        "stateMutability": "view",
    },
    {
        "type": "function",
        "name": "symbol",
        "inputs": [],
        "outputs": [_param("", "string")],
        "stateMutability": "view",
    },
    {
        "type": "event",
        "name": "Transfer",
        "inputs": [
            dict(_param("from", "address"), indexed=True),
            dict(_param("to", "address"), indexed=True),
            dict(_param("value", "uint256"), indexed=False),
        ],
        "anonymous": False,
    },
    {
        "type": "event",
        "name": "Approval",
        "inputs": [
            dict(_param("owner", "address"), indexed=True),
            dict(_param("spender", "address"), indexed=True),
            dict(_param("value", "uint256"), indexed=False),
        ],
        "anonymous": False,
    },
]


# ---------------------------------------------------------------------------
# Hardhat artifacts
# ---------------------------------------------------------------------------

def _find_artifacts_dir() -> Path:
    """
    Locate the Hardhat artifacts/contracts/ directory.

    AURUM_ARTIFACTS_DIR wins; otherwise searches from the current working
    directory upward.
    """
    override = os.environ.get("AURUM_ARTIFACTS_DIR")
    if override:
        return Path(override).expanduser()

    current = Path.cwd().resolve()
    for parent in [current, *current.parents]:
        candidate = parent / "artifacts" / "contracts"
        if candidate.is_dir():
            return candidate
    raise FileNotFoundError(
        "Cannot find artifacts/contracts/. Run 'npx hardhat compile' "
        "or set AURUM_ARTIFACTS_DIR."
    )


def load_artifact(contract_name: str) -> dict[str, Any]:
    """
    Load a Hardhat compilation artifact.

    Raises:
        FileNotFoundError: If the artifact file is missing
    """
    path = _find_artifacts_dir() / f"{contract_name}.sol" / f"{contract_name}.json"
    if not path.exists():
        raise FileNotFoundError(
            f"Artifact not found: {path}. Run 'npx hardhat compile'."
        )

    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


def load_bytecode(contract_name: str) -> str:
    """Deployment bytecode (0x-prefixed hex) for a compiled contract."""
    bytecode = load_artifact(contract_name).get("bytecode", "")
    # Foundry-style artifacts nest it under "object"
    if isinstance(bytecode, dict):
        bytecode = bytecode.get("object", "")
    if not bytecode or bytecode == "0x":
        raise ValueError(f"No bytecode in artifact for {contract_name}")
    if not bytecode.startswith("0x"):
        bytecode = "0x" + bytecode
    return bytecode


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------

def canonical_type(param: dict[str, Any]) -> str:
    """ABI type string with tuples expanded, e.g. ``(address,int64,bool)[]``."""
    type_ = param["type"]
    if type_.startswith("tuple"):
        inner = ",".join(canonical_type(c) for c in param.get("components", []))
        return f"({inner}){type_[len('tuple'):]}"
    return type_


def find_entry(abi: list[dict[str, Any]], name: str, kind: str = "function") -> dict[str, Any]:
    for entry in abi:
        if entry.get("type") == kind and entry.get("name") == name:
            return entry
    raise ValueError(f"{kind.capitalize()} {name} not found in ABI")


def signature(entry: dict[str, Any]) -> str:
    types = ",".join(canonical_type(p) for p in entry.get("inputs", []))
    return f"{entry['name']}({types})"


def encode_call(abi: list[dict[str, Any]], function_name: str, args: list | tuple) -> str:
    """ABI-encode a function call to hex calldata."""
    func = find_entry(abi, function_name)
    inputs = func.get("inputs", [])
    if len(args) != len(inputs):
        raise ValueError(
            f"{function_name} expects {len(inputs)} arguments, got {len(args)}"
        )

    input_types = [canonical_type(p) for p in inputs]
    selector = _keccak256(signature(func).encode("utf-8"))[:4]
    encoded_args = encode(input_types, list(args)) if args else b""

    return "0x" + selector.hex() + encoded_args.hex()


def decode_result(abi: list[dict[str, Any]], function_name: str, data: str) -> Any:
    """
    ABI-decode a function call result.

    Returns:
        Decoded result (single value or tuple)
    """
    func = find_entry(abi, function_name)
    output_types = [canonical_type(p) for p in func.get("outputs", [])]
    if not output_types or data in (None, "", "0x"):
        return None

    decoded = decode(output_types, bytes.fromhex(data.removeprefix("0x")))
    if len(decoded) == 1:
        return decoded[0]
    return decoded
