"""
Pneuma - On-chain interaction layer for Aurum.

Provides the JSON-RPC client, the CreateAndManageHTSTokens ABI, Hedera Token
Service structures and the transaction executor used by every command.

Uses httpx + eth-account + eth-abi instead of the heavyweight web3.py.
"""
