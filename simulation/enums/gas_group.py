from enum import Enum


class GasGroup(str, Enum):
    BASIC_TRANSFER = "Basic Transfer"
    AUTHORIZATION = "Authorization"
    ADVANCED_TRANSFER = "Advanced Transfer"
    SUPPLY_MANAGEMENT = "Supply Management"
    ADMINISTRATIVE = "Administrative"
    QUERY = "Query"
    OTHER = "Other Operation"


class EfficiencyTier(str, Enum):
    HIGHLY_EFFICIENT = "Highly Efficient"
    EFFICIENT = "Efficient"
    MODERATE = "Moderate"
    HIGH_GAS = "High Gas"
    VERY_HIGH_GAS = "Very High Gas"


class GasLevel(str, Enum):
    """Position of a gas figure inside its group's distribution thresholds."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
