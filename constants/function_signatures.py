# constants/function_signatures.py

# Canonical ERC-20 function signatures, keyed by function name.
# Selectors are derived from these strings (keccak256, first 4 bytes).
ERC20_FUNCTION_SIGNATURES = {
    "transfer": "transfer(address,uint256)",
    "transferFrom": "transferFrom(address,address,uint256)",
    "approve": "approve(address,uint256)",
    "balanceOf": "balanceOf(address)",
    "allowance": "allowance(address,address)",
    "totalSupply": "totalSupply()",
    "decimals": "decimals()",
    "name": "name()",
    "symbol": "symbol()",
}

# OpenZeppelin extensions shipped by regulated stablecoins
ERC20_EXTENSION_SIGNATURES = {
    "mint": "mint(address,uint256)",
    "burn": "burn(uint256)",
    "burnFrom": "burnFrom(address,uint256)",
    "increaseAllowance": "increaseAllowance(address,uint256)",
    "decreaseAllowance": "decreaseAllowance(address,uint256)",
    "pause": "pause()",
    "unpause": "unpause()",
    "paused": "paused()",
}

# Circle FiatToken admin functions
BLACKLIST_FUNCTION_SIGNATURES = {
    "blacklist": "blacklist(address)",
    "unBlacklist": "unBlacklist(address)",
    "isBlacklisted": "isBlacklisted(address)",
}

# Well-known selectors, used to cross-check the derived ones
WELL_KNOWN_SELECTORS = {
    "transfer": "0xa9059cbb",
    "transferFrom": "0x23b872dd",
    "approve": "0x095ea7b3",
    "balanceOf": "0x70a08231",
}

# Zero-based indexes of the parameters that carry a token amount (scaled by decimals)
AMOUNT_PARAMETER_INDEXES = {
    "transfer": (1,),
    "transferFrom": (2,),
    "approve": (1,),
    "mint": (1,),
    "burn": (0,),
    "burnFrom": (1,),
    "increaseAllowance": (1,),
    "decreaseAllowance": (1,),
}

# uint returns expressed in token units (divided by 10**decimals when decoded)
TOKEN_AMOUNT_RETURNS = ("balanceOf", "allowance", "totalSupply")

# Functions where a zero address argument is worth a warning
ADDRESS_SENSITIVE_FUNCTIONS = (
    "transfer",
    "transferFrom",
    "approve",
    "mint",
    "burnFrom",
    "increaseAllowance",
    "decreaseAllowance",
)
