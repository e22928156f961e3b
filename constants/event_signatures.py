# constants/event_signatures.py

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

# ERC-20 Transfer(address indexed from, address indexed to, uint256 value)
# This is the SHA3 hash of the event signature "Transfer(address,address,uint256)"
TRANSFER_EVENT_SIGNATURE = "0xddf252ad1be2c89b69c2b068fc378daa952ba7f163c4a11628f55a4df523b3ef"

# ERC-20 Approval(address indexed owner, address indexed spender, uint256 value)
# This is the SHA3 hash of the event signature "Approval(address,address,uint256)"
APPROVAL_EVENT_SIGNATURE = "0x8c5be1e5ebec7d5bd14f71427d1e84f3dd0314c0f7b2291e5b200ac8c7c3b925"

# FiatToken Blacklisted(address indexed _account)
BLACKLISTED_EVENT_SIGNATURE = "0xffa4e6181777692565cf28528fc88fd1516ea86b56da075235fa575af6a4b855"

# FiatToken UnBlacklisted(address indexed _account)
UNBLACKLISTED_EVENT_SIGNATURE = "0x117e3210bb9aa7d9baff172026820255c6f6c30ba8999d1c2fd88e2848137c4e"
