# constants/gas_constants.py
from simulation.enums.contract_type import FunctionCategory
from simulation.enums.gas_group import EfficiencyTier, GasGroup, GasLevel

# Expected gas per function, the baseline for efficiency ratios
DEFAULT_GAS_LIMITS = {
    "transfer": 65000,
    "transferFrom": 70000,
    "approve": 50000,
    "balanceOf": 30000,
    "allowance": 30000,
    "totalSupply": 30000,
    "mint": 80000,
    "burn": 60000,
    "burnFrom": 70000,
    "increaseAllowance": 55000,
    "decreaseAllowance": 55000,
    "pause": 45000,
    "unpause": 45000,
}
UNKNOWN_FUNCTION_BASELINE = 50000

# Fallback gas figure when eth_estimateGas fails, by function category
DEFAULT_GAS_BY_CATEGORY = {
    FunctionCategory.TRANSFER: 65000,
    FunctionCategory.APPROVAL: 50000,
    FunctionCategory.MINT: 80000,
    FunctionCategory.BURN: 60000,
    FunctionCategory.ADMIN: 45000,
    FunctionCategory.VIEW: 30000,
    FunctionCategory.OTHER: 100000,
}

GAS_GROUP_FUNCTIONS = {
    GasGroup.BASIC_TRANSFER: ("transfer",),
    GasGroup.AUTHORIZATION: ("approve", "increaseAllowance", "decreaseAllowance"),
    GasGroup.ADVANCED_TRANSFER: ("transferFrom",),
    GasGroup.SUPPLY_MANAGEMENT: ("mint", "burn", "burnFrom"),
    GasGroup.ADMINISTRATIVE: ("pause", "unpause"),
    GasGroup.QUERY: ("balanceOf", "allowance", "totalSupply", "decimals", "name", "symbol", "paused"),
    GasGroup.OTHER: (),
}

# Group for functions outside GAS_GROUP_FUNCTIONS, from their declared category
CATEGORY_GAS_GROUP = {
    FunctionCategory.TRANSFER: GasGroup.BASIC_TRANSFER,
    FunctionCategory.APPROVAL: GasGroup.AUTHORIZATION,
    FunctionCategory.MINT: GasGroup.SUPPLY_MANAGEMENT,
    FunctionCategory.BURN: GasGroup.SUPPLY_MANAGEMENT,
    FunctionCategory.ADMIN: GasGroup.ADMINISTRATIVE,
    FunctionCategory.VIEW: GasGroup.QUERY,
    FunctionCategory.OTHER: GasGroup.OTHER,
}

# (upper bound of gas_used / baseline, tier), checked in order
EFFICIENCY_RATIO_TIERS = (
    (0.8, EfficiencyTier.HIGHLY_EFFICIENT),
    (1.0, EfficiencyTier.EFFICIENT),
    (1.3, EfficiencyTier.MODERATE),
    (1.6, EfficiencyTier.HIGH_GAS),
)
WORST_EFFICIENCY_TIER = EfficiencyTier.VERY_HIGH_GAS

# Average gas per group: <= HIGH is high efficiency, <= MEDIUM is medium, above is low
GROUP_GAS_THRESHOLDS = {
    GasGroup.QUERY: {GasLevel.HIGH: 30000, GasLevel.MEDIUM: 40000},
    GasGroup.BASIC_TRANSFER: {GasLevel.HIGH: 50000, GasLevel.MEDIUM: 70000},
    GasGroup.AUTHORIZATION: {GasLevel.HIGH: 45000, GasLevel.MEDIUM: 60000},
    GasGroup.ADVANCED_TRANSFER: {GasLevel.HIGH: 65000, GasLevel.MEDIUM: 85000},
    GasGroup.SUPPLY_MANAGEMENT: {GasLevel.HIGH: 70000, GasLevel.MEDIUM: 100000},
    GasGroup.ADMINISTRATIVE: {GasLevel.HIGH: 40000, GasLevel.MEDIUM: 60000},
    GasGroup.OTHER: {GasLevel.HIGH: 50000, GasLevel.MEDIUM: 80000},
}

GROUP_RECOMMENDATIONS = {
    GasGroup.BASIC_TRANSFER: {
        GasLevel.MEDIUM: "Consider batching multiple transfers to reduce per-transaction overhead",
        GasLevel.LOW: "Review token contract implementation for gas optimization opportunities",
    },
    GasGroup.AUTHORIZATION: {
        GasLevel.MEDIUM: "Use increaseAllowance/decreaseAllowance instead of setting allowance to 0 first",
        GasLevel.LOW: "Consider using permit() for gasless approvals where supported",
    },
    GasGroup.ADVANCED_TRANSFER: {
        GasLevel.MEDIUM: "Ensure sufficient allowance is set to avoid failed transactions",
        GasLevel.LOW: "Consider direct transfers instead of transferFrom when possible",
    },
    GasGroup.SUPPLY_MANAGEMENT: {
        GasLevel.MEDIUM: "Batch mint/burn operations when possible",
        GasLevel.LOW: "Review access control patterns for gas efficiency",
    },
    GasGroup.ADMINISTRATIVE: {
        GasLevel.MEDIUM: "Combine administrative operations in a single transaction",
        GasLevel.LOW: "Consider using proxy patterns for upgradeable contracts",
    },
    GasGroup.QUERY: {
        GasLevel.MEDIUM: "Use view functions locally instead of transactions",
        GasLevel.LOW: "Cache query results to avoid repeated calls",
    },
    GasGroup.OTHER: {},
}

# Comparison recommendations
STRONG_VARIATION_PERCENT = 50
MODERATE_VARIATION_PERCENT = 20
STRONG_VARIATION_MESSAGE = "Significant gas variation detected. Consider using the most efficient variant."
MODERATE_VARIATION_MESSAGE = "Moderate gas differences found. Review parameters for optimization opportunities."
MIXED_FUNCTIONS_MESSAGE = (
    "Different function types have varying gas costs. Choose the most appropriate method for your use case."
)
FAILED_SIMULATIONS_MESSAGE = "{count} simulation(s) failed. Address the underlying issues to avoid wasted gas."
NO_SUCCESSFUL_SIMULATIONS_MESSAGE = "No successful simulations to compare"

# Per-function optimisation hints: (ratio above which the hint applies, hint)
HIGH_USAGE_RATIO = 1.5
HIGH_USAGE_SUGGESTION = "Gas usage is significantly higher than expected. Review transaction parameters."
FUNCTION_SUGGESTIONS = {
    "transfer": (1.2, "Consider checking recipient address validity before transaction."),
    "transferFrom": (1.3, "Ensure sufficient allowance is set to avoid additional gas costs."),
    "approve": (1.2, "Consider using increaseAllowance/decreaseAllowance for better gas efficiency."),
    "mint": (1.4, "Administrative functions may have higher gas costs due to access control checks."),
    "burn": (1.4, "Administrative functions may have higher gas costs due to access control checks."),
}

# Batch analysis
HIGH_BATCH_GAS = 500000
BATCH_REFERENCE_GAS_PER_OPERATION = 100000
BATCH_PARTIAL_FAILURE_MESSAGE = "Some operations failed - check parameters and balances"
BATCH_HIGH_GAS_MESSAGE = "High total gas usage - consider splitting into smaller batches"
BATCH_FAILURE_POSITIONS_MESSAGE = "Operations failed at positions: {positions}"

WEI_PER_ETHER = 10**18
DEFAULT_REFERENCE_PRICE_USD = 2000.0
