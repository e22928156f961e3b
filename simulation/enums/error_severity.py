from enum import Enum


class Severity(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ErrorCategory(str, Enum):
    BALANCE = "Balance Error"
    ALLOWANCE = "Allowance Error"
    ADDRESS = "Address Error"
    CONTRACT_STATE = "Contract State Error"
    AUTHORIZATION = "Authorization Error"
    PERMISSION = "Permission Error"
    OTHER = "Other Error"
