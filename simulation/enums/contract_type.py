from enum import Enum


class ContractType(str, Enum):
    ERC20 = "erc20"          # fungible token
    ERC721 = "erc721"        # non-fungible token
    CUSTOM = "custom"


class StateMutability(str, Enum):
    VIEW = "view"
    PURE = "pure"
    NONPAYABLE = "nonpayable"
    PAYABLE = "payable"


class FunctionCategory(str, Enum):
    TRANSFER = "transfer"
    APPROVAL = "approval"
    MINT = "mint"
    BURN = "burn"
    ADMIN = "admin"
    VIEW = "view"
    OTHER = "other"
