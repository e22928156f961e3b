from typing import Dict, Iterable, Optional, Tuple

from constants.function_signatures import (
    AMOUNT_PARAMETER_INDEXES,
    BLACKLIST_FUNCTION_SIGNATURES,
    ERC20_EXTENSION_SIGNATURES,
    ERC20_FUNCTION_SIGNATURES,
)
from simulation.enums.contract_type import ContractType, FunctionCategory, StateMutability
from simulation.models.contract import ContractDescriptor, EventInput, EventSignature, FunctionSignature
from simulation.registry.contract_registry import ContractRegistry
from utils.web3_utils import event_topic, function_selector

PYUSD_MAINNET_ADDRESS = "0x6c3ea9036406852006290770BEdFcAbA0e23A0e8"
PYUSD_SEPOLIA_ADDRESS = "0xCaC524BcA292aaade2DF8A05cC58F0a65B1B3bB9"
USDC_MAINNET_ADDRESS = "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"

# name -> (parameter names, return type, mutability, category, description)
_FUNCTION_METADATA: Dict[str, Tuple[Tuple[str, ...], Optional[str], StateMutability, FunctionCategory, str]] = {
    "transfer": (("to", "amount"), "bool", StateMutability.NONPAYABLE, FunctionCategory.TRANSFER,
                 "Transfer tokens to another address"),
    "transferFrom": (("from", "to", "amount"), "bool", StateMutability.NONPAYABLE, FunctionCategory.TRANSFER,
                     "Transfer tokens on behalf of another address"),
    "approve": (("spender", "amount"), "bool", StateMutability.NONPAYABLE, FunctionCategory.APPROVAL,
                "Approve a spender to use tokens"),
    "balanceOf": (("account",), "uint256", StateMutability.VIEW, FunctionCategory.VIEW,
                  "Token balance of an address"),
    "allowance": (("owner", "spender"), "uint256", StateMutability.VIEW, FunctionCategory.VIEW,
                  "Remaining amount a spender may use"),
    "totalSupply": ((), "uint256", StateMutability.VIEW, FunctionCategory.VIEW, "Total token supply"),
    "decimals": ((), "uint8", StateMutability.VIEW, FunctionCategory.VIEW, "Token decimal places"),
    "name": ((), "string", StateMutability.VIEW, FunctionCategory.VIEW, "Token name"),
    "symbol": ((), "string", StateMutability.VIEW, FunctionCategory.VIEW, "Token symbol"),
    "mint": (("to", "amount"), None, StateMutability.NONPAYABLE, FunctionCategory.MINT,
             "Mint new tokens (supply controller only)"),
    "burn": (("amount",), None, StateMutability.NONPAYABLE, FunctionCategory.BURN, "Burn tokens of the caller"),
    "burnFrom": (("account", "amount"), None, StateMutability.NONPAYABLE, FunctionCategory.BURN,
                 "Burn tokens from an address using allowance"),
    "increaseAllowance": (("spender", "addedValue"), "bool", StateMutability.NONPAYABLE, FunctionCategory.APPROVAL,
                          "Increase the allowance of a spender"),
    "decreaseAllowance": (("spender", "subtractedValue"), "bool", StateMutability.NONPAYABLE,
                          FunctionCategory.APPROVAL, "Decrease the allowance of a spender"),
    "pause": ((), None, StateMutability.NONPAYABLE, FunctionCategory.ADMIN, "Pause token operations"),
    "unpause": ((), None, StateMutability.NONPAYABLE, FunctionCategory.ADMIN, "Resume token operations"),
    "paused": ((), "bool", StateMutability.VIEW, FunctionCategory.VIEW, "Whether the token is paused"),
    "blacklist": (("account",), None, StateMutability.NONPAYABLE, FunctionCategory.ADMIN,
                  "Block an address from token operations"),
    "unBlacklist": (("account",), None, StateMutability.NONPAYABLE, FunctionCategory.ADMIN,
                    "Remove an address from the blacklist"),
    "isBlacklisted": (("account",), "bool", StateMutability.VIEW, FunctionCategory.VIEW,
                      "Whether an address is blacklisted"),
}


def build_function(name: str, canonical_name: str) -> FunctionSignature:
    param_names, return_type, mutability, category, description = _FUNCTION_METADATA[name]
    inner = canonical_name[canonical_name.index("(") + 1 : -1]
    return FunctionSignature(
        name=name,
        selector=function_selector(canonical_name),
        canonical_name=canonical_name,
        param_types=tuple(t for t in inner.split(",") if t),
        param_names=param_names,
        return_type=return_type,
        state_mutability=mutability,
        category=category,
        amount_params=AMOUNT_PARAMETER_INDEXES.get(name, ()),
        description=description,
    )


def build_functions(*signature_tables: Dict[str, str]) -> Dict[str, FunctionSignature]:
    functions = {}
    for table in signature_tables:
        for name, canonical_name in table.items():
            functions[name] = build_function(name, canonical_name)
    return functions


def build_event(name: str, fields: Iterable[Tuple[str, str, bool]]) -> EventSignature:
    inputs = tuple(EventInput(name=n, type=t, indexed=i) for n, t, i in fields)
    canonical_name = f"{name}({','.join(event_input.type for event_input in inputs)})"
    return EventSignature(name=name, topic=event_topic(canonical_name), inputs=inputs)


ERC20_EVENTS = {
    "Transfer": build_event("Transfer", [("from", "address", True), ("to", "address", True), ("value", "uint256", False)]),
    "Approval": build_event(
        "Approval", [("owner", "address", True), ("spender", "address", True), ("value", "uint256", False)]
    ),
}

BLACKLIST_EVENTS = {
    "Blacklisted": build_event("Blacklisted", [("_account", "address", True)]),
    "UnBlacklisted": build_event("UnBlacklisted", [("_account", "address", True)]),
}


def pyusd(network: str, address: str) -> ContractDescriptor:
    return ContractDescriptor(
        address=address,
        network=network,
        symbol="PYUSD",
        name="PayPal USD",
        decimals=6,
        contract_type=ContractType.ERC20,
        functions=build_functions(ERC20_FUNCTION_SIGNATURES, ERC20_EXTENSION_SIGNATURES),
        events=dict(ERC20_EVENTS),
    )


def usdc(network: str, address: str) -> ContractDescriptor:
    return ContractDescriptor(
        address=address,
        network=network,
        symbol="USDC",
        name="USD Coin",
        decimals=6,
        contract_type=ContractType.ERC20,
        functions=build_functions(ERC20_FUNCTION_SIGNATURES, ERC20_EXTENSION_SIGNATURES, BLACKLIST_FUNCTION_SIGNATURES),
        events={**ERC20_EVENTS, **BLACKLIST_EVENTS},
    )


def build_default_registry() -> ContractRegistry:
    """A fresh registry seeded with PYUSD (mainnet, sepolia) and USDC (mainnet); PYUSD is each network's default."""
    registry = ContractRegistry()
    registry.register(pyusd("mainnet", PYUSD_MAINNET_ADDRESS), default=True)
    registry.register(pyusd("sepolia", PYUSD_SEPOLIA_ADDRESS), default=True)
    registry.register(usdc("mainnet", USDC_MAINNET_ADDRESS))
    return registry
