"""
Shared fixtures: an in-memory ledger standing in for the JSON-RPC relay.

FakeLedger decodes the signed raw transactions the executor sends, runs a
tiny token model for the CreateAndManageHTSTokens methods and answers with
receipts whose logs are ABI-encoded like the real contract's.
"""

from __future__ import annotations

import itertools
from collections import defaultdict
from pathlib import Path
from typing import Any, Optional

import pytest
import rlp
from eth_abi import decode, encode
from eth_account import Account

from aurum.config import AurumConfig
from aurum.errors import NetworkError, ReceiptTimeoutError
from aurum.pneuma.abi import ERC20_ABI, HTS_CONTRACT_ABI, canonical_type, find_entry, signature
from aurum.pneuma.events import event_topic
from aurum.pneuma.executor import TransactionExecutor
from aurum.pneuma.hts import ResponseCode
from aurum.pneuma.rpc import NETWORKS, _keccak256
from aurum.session import Session

TEST_PRIVATE_KEY = "0x" + "4c" * 32
CONTRACT_ADDRESS = "0xf528bca958da0e7ab35f77a7561b55519fbcec68"
TOKEN_ADDRESS = "0x000000000000000000000000000000000072422b"


class _Revert(Exception):
    pass


def _selector(entry: dict[str, Any]) -> bytes:
    return _keccak256(signature(entry).encode("utf-8"))[:4]


def _topic_address(address: str) -> str:
    return "0x" + "0" * 24 + address.lower().removeprefix("0x")


class FakeLedger:
    """Duck-typed stand-in for RpcClient."""

    def __init__(self, network=NETWORKS["local"]) -> None:
        self.network = network
        self.gas_price = 710_000_000_000
        self.nonces: dict[str, int] = defaultdict(int)
        self.balances: dict[tuple[str, str], int] = defaultdict(int)
        self.allowances: dict[tuple[str, str, str], int] = defaultdict(int)
        self.supply: dict[str, int] = defaultdict(int)
        self.receipts: dict[str, dict[str, Any]] = {}
        self.submitted: list[dict[str, Any]] = []
        self.fail_sends = False
        self.withhold_receipts = False
        self.revert_methods: set[str] = set()
        self.duplicate_events = False
        self.extra_logs: list[dict[str, Any]] = []
        self.hbar: dict[str, int] = defaultdict(lambda: 100 * 10**18)
        self._ids = itertools.count(0x72500)
        self._functions = {
            _selector(e): e for e in HTS_CONTRACT_ABI if e["type"] == "function"
        }

    # --- token model helpers ---

    def balance_of(self, token: str, account: str) -> int:
        return self.balances[(token.lower(), account.lower())]

    def credit(self, token: str, account: str, amount: int) -> None:
        self.balances[(token.lower(), account.lower())] += amount

    def _new_address(self) -> str:
        return "0x" + f"{next(self._ids):040x}"

    # --- RpcClient interface ---

    def close(self) -> None:
        pass

    def get_nonce(self, address: str) -> int:
        return self.nonces[address.lower()]

    def get_gas_price(self) -> int:
        return self.gas_price

    def get_chain_id(self) -> int:
        return self.network.chain_id

    def get_balance(self, address: str) -> int:
        return self.hbar[address.lower()]

    def send_raw_transaction(self, raw_tx: str) -> str:
        if self.fail_sends:
            raise NetworkError("RPC eth_sendRawTransaction failed: connection refused")

        raw = bytes.fromhex(raw_tx.removeprefix("0x"))
        nonce, gas_price, gas, to, value, data, _v, _r, _s = rlp.decode(raw)
        sender = Account.recover_transaction(raw_tx)
        tx_hash = "0x" + _keccak256(raw).hex()
        self.nonces[sender.lower()] += 1

        tx = {
            "hash": tx_hash,
            "from": sender,
            "to": "0x" + to.hex() if to else None,
            "value": int.from_bytes(value, "big"),
            "gas": int.from_bytes(gas, "big"),
            "data": data,
        }
        self.submitted.append(tx)
        self.receipts[tx_hash] = self._execute(tx)
        return tx_hash

    def wait_for_receipt(self, tx_hash: str, timeout: float = 120, poll_interval: float = 2.0) -> dict:
        receipt = self.receipts.get(tx_hash)
        if receipt is None or self.withhold_receipts:
            raise ReceiptTimeoutError(tx_hash, timeout)
        return receipt

    def eth_call(self, to: str, data: str) -> str:
        payload = bytes.fromhex(data.removeprefix("0x"))
        for entry in ERC20_ABI:
            if entry["type"] == "function" and _selector(entry) == payload[:4]:
                break
        else:
            return "0x"
        types = [canonical_type(p) for p in entry["inputs"]]
        args = decode(types, payload[4:]) if types else ()
        if entry["name"] == "balanceOf":
            result = encode(["uint256"], [self.balance_of(to, args[0])])
        elif entry["name"] == "decimals":
            result = encode(["uint8"], [0])
        elif entry["name"] == "symbol":
            result = encode(["string"], ["MFT"])
        else:
            result = encode(["uint256"], [self.supply[to.lower()]])
        return "0x" + result.hex()

    # --- execution ---

    def _log(self, address: str, abi: list, name: str, values: list, indexed: Optional[list] = None) -> dict:
        entry = find_entry(abi, name, kind="event")
        plain = [canonical_type(p) for p in entry["inputs"] if not p.get("indexed")]
        return {
            "address": address,
            "topics": [event_topic(entry)] + (indexed or []),
            "data": "0x" + encode(plain, values).hex(),
        }

    def _response(self, contract: str, code: int = ResponseCode.SUCCESS) -> dict:
        return self._log(contract, HTS_CONTRACT_ABI, "ResponseCode", [int(code)])

    def _move(self, token: str, sender: str, receiver: str, amount: int) -> dict:
        if self.balance_of(token, sender) < amount:
            raise _Revert("insufficient token balance")
        self.credit(token, sender, -amount)
        self.credit(token, receiver, amount)
        return self._log(
            token, ERC20_ABI, "Transfer", [amount],
            [_topic_address(sender), _topic_address(receiver)],
        )

    def _execute(self, tx: dict[str, Any]) -> dict[str, Any]:
        logs: list[dict] = []
        status = 1
        contract_address = None
        try:
            if tx["to"] is None:
                contract_address = self._new_address()
            else:
                logs = self._call(tx) + [dict(log) for log in self.extra_logs]
        except _Revert:
            status = 0
            logs = []

        for i, log in enumerate(logs):
            log["logIndex"] = hex(i)
        return {
            "transactionHash": tx["hash"],
            "status": hex(status),
            "blockNumber": hex(len(self.submitted)),
            "gasUsed": hex(min(tx["gas"], 60_000)),
            "contractAddress": contract_address,
            "logs": logs,
        }

    def _call(self, tx: dict[str, Any]) -> list[dict]:
        data: bytes = tx["data"]
        contract = tx["to"]
        entry = self._functions.get(data[:4])
        if entry is None:
            raise _Revert("unknown selector")
        name = entry["name"]
        if name in self.revert_methods:
            raise _Revert(f"{name} forced revert")

        args = decode([canonical_type(p) for p in entry["inputs"]], data[4:])

        if name == "createFungibleTokenPublic":
            if tx["value"] == 0:
                raise _Revert("creation fee not paid")
            token = self._new_address()
            initial, treasury = args[3], args[7]
            self.credit(token, treasury, initial)
            self.supply[token] = initial
            return [self._log(contract, HTS_CONTRACT_ABI, "CreatedToken", [token])]

        if name == "mintTokenPublic":
            token, amount, _metadata = args
            self.credit(token, contract, amount)
            self.supply[token.lower()] += amount
            logs = [
                self._response(contract),
                self._log(contract, HTS_CONTRACT_ABI, "MintedToken",
                          [self.supply[token.lower()], []]),
            ]
            if self.duplicate_events:
                logs.append(self._log(contract, HTS_CONTRACT_ABI, "MintedToken", [-1, []]))
            return logs

        if name == "transferTokenPublic":
            token, sender, receiver, amount = args
            return [self._move(token, sender, receiver, amount), self._response(contract)]

        if name == "approvePublic":
            token, spender, amount = args
            self.allowances[(token.lower(), contract.lower(), spender.lower())] = amount
            return [self._response(contract)]

        if name == "transferFromPublic":
            token, owner, receiver, amount = args
            key = (token.lower(), owner.lower(), contract.lower())
            if self.allowances[key] < amount:
                raise _Revert("spender does not have allowance")
            log = self._move(token, owner, receiver, amount)
            self.allowances[key] -= amount
            return [log, self._response(contract)]

        if name == "cryptoTransferPublic":
            _hbar, token_lists = args
            for token, legs, _nfts in token_lists:
                if sum(leg[1] for leg in legs) != 0:
                    raise _Revert("transfers not zero sum for token")
                for account, amount, _approval in legs:
                    if self.balance_of(token, account) + amount < 0:
                        raise _Revert("insufficient token balance")
                for account, amount, _approval in legs:
                    self.credit(token, account, amount)
            return [self._response(contract)]

        raise _Revert(f"{name} not modelled")


@pytest.fixture()
def ledger() -> FakeLedger:
    return FakeLedger()


@pytest.fixture()
def account():
    return Account.from_key(TEST_PRIVATE_KEY)


@pytest.fixture()
def executor(ledger: FakeLedger, account) -> TransactionExecutor:
    return TransactionExecutor(ledger, account, receipt_timeout=0, poll_interval=0)


@pytest.fixture()
def env_path(tmp_path: Path) -> Path:
    return tmp_path / ".aurum" / ".env"


@pytest.fixture()
def session(ledger: FakeLedger, executor: TransactionExecutor, env_path: Path) -> Session:
    config = AurumConfig(
        network="local",
        contract_address=CONTRACT_ADDRESS,
        token_address=TOKEN_ADDRESS,
        env_path=env_path,
    )
    return Session(config, network=ledger.network, client=ledger, executor=executor)
