# constants/error_selectors.py

# Error(string), the standard revert reason envelope
ERROR_STRING_SELECTOR = "0x08c379a0"

# Bare selectors of the balance and allowance errors, matched as keywords
BALANCE_ERROR_SELECTOR = "0x356680b7"
ALLOWANCE_ERROR_SELECTOR = "0xdab70cb7"

# Known 4-byte error codes and their canonical messages.
# Exported and cached results rely on these exact strings.
KNOWN_ERROR_CODES = {
    "0x08c379a0": "Error string",
    "0x356680b7": "ERC20: transfer amount exceeds balance",
    "0x4e487b71": "Panic/Arithmetic error",
    "0x01336cea": "ERC20: transfer from the zero address",
    "0xbbc67f8f": "ERC20: transfer to the zero address",
    "0x7939f424": "ERC20: approve from the zero address",
    "0xd505accf": "ERC20: permit expired",
    "0xdab70cb7": "ERC20: insufficient allowance",
    "0xd1bebf0c": "ERC20: transfer to the zero address",
    "0x8baa579f": "ERC20: invalid signature",
    "0x0827a183": "ERC20Permit: expired deadline",
    "0x8f4eb604": "ERC20Permit: invalid signature",
    "0x3b8da488": "AccessControl: account is missing role",
    "0x219f5d17": "Token operation is paused",
    "0xf0019fe6": "Address is blacklisted",
    "0x1bb2a6b6": "ERC20: cannot approve from the zero address",
    "0x710086b0": "ERC20: cannot approve to the zero address",
}

BALANCE_ERROR_KEYWORDS = ("insufficient balance", "transfer amount exceeds balance", BALANCE_ERROR_SELECTOR)
ALLOWANCE_ERROR_KEYWORDS = ("insufficient allowance", ALLOWANCE_ERROR_SELECTOR)

HIGH_SEVERITY_KEYWORDS = (
    "insufficient balance",
    "transfer amount exceeds balance",
    "insufficient allowance",
    "paused",
    "blacklisted",
)
MEDIUM_SEVERITY_KEYWORDS = ("zero address", "invalid signature", "expired", "missing role")

# Ordered: the first matching keyword group wins
ERROR_SUGGESTIONS = (
    (
        ("insufficient balance", "transfer amount exceeds balance"),
        "Ensure the sender has sufficient token balance for this transfer",
    ),
    (("insufficient allowance",), "Increase the allowance before attempting this transfer"),
    (("zero address",), "Provide a valid non-zero address"),
    (("paused",), "Wait for the contract to be unpaused before attempting this operation"),
    (("blacklisted",), "This address is blacklisted and cannot perform token operations"),
    (("expired",), "The permit or authorization has expired, generate a new one"),
    (("invalid signature",), "Verify the signature parameters and ensure they are correctly formatted"),
    (("missing role",), "This operation requires special permissions that the sender does not have"),
)

HYPOTHETICAL_SUCCESS_NOTE = "This transaction would likely succeed with sufficient balance/allowance"
