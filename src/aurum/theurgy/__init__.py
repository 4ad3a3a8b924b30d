"""
Theurgy - Command implementations for Aurum.

Each module corresponds to a top-level CLI command:
- deploy:   Deploy CreateAndManageHTSTokens
- create:   Create a fungible token with the contract as treasury
- mint:     Mint to the treasury
- transfer: Mint-then-transfer flows, plus approve
- balance:  Read balances through the token's ERC-20 facade
"""
