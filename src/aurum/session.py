"""
Session - the per-run network connection, signer and contract handles.

Created once by the CLI group and handed to every command.  Nothing is
shared between runs.
"""

from __future__ import annotations

from functools import cached_property
from typing import Optional

from .config import AurumConfig
from .errors import ConfigError
from .pneuma.abi import ERC20_ABI, HTS_CONTRACT_ABI, HTS_CONTRACT_NAME
from .pneuma.executor import Contract, TransactionExecutor
from .pneuma.rpc import Network, RpcClient, resolve_network
from .sigil.eth import get_account, load_private_key


class Session:
    def __init__(
        self,
        config: AurumConfig,
        network: Optional[Network] = None,
        client: Optional[RpcClient] = None,
        executor: Optional[TransactionExecutor] = None,
    ) -> None:
        self.config = config
        self.network = network or resolve_network(config.network, config.rpc_url)
        if client is not None:
            self.__dict__["client"] = client
        if executor is not None:
            self.__dict__["executor"] = executor

    @cached_property
    def client(self) -> RpcClient:
        return RpcClient(self.network)

    @cached_property
    def executor(self) -> TransactionExecutor:
        try:
            account = get_account(load_private_key(self.config.env_path))
        except ValueError as exc:
            raise ConfigError(str(exc)) from None
        return TransactionExecutor(self.client, account)

    def hts_contract(self) -> Contract:
        return Contract(
            address=self.config.require_contract(),
            abi=HTS_CONTRACT_ABI,
            name=HTS_CONTRACT_NAME,
        )

    def token_contract(self) -> Contract:
        return Contract(address=self.config.require_token(), abi=ERC20_ABI, name="HTS token")

    def close(self) -> None:
        if "client" in self.__dict__:
            self.client.close()
