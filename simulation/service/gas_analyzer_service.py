from collections import defaultdict
from decimal import Decimal
from typing import Dict, List, Optional, Protocol, Sequence

from constants.gas_constants import (
    BATCH_FAILURE_POSITIONS_MESSAGE,
    BATCH_HIGH_GAS_MESSAGE,
    BATCH_PARTIAL_FAILURE_MESSAGE,
    BATCH_REFERENCE_GAS_PER_OPERATION,
    CATEGORY_GAS_GROUP,
    DEFAULT_GAS_LIMITS,
    DEFAULT_REFERENCE_PRICE_USD,
    EFFICIENCY_RATIO_TIERS,
    FAILED_SIMULATIONS_MESSAGE,
    FUNCTION_SUGGESTIONS,
    GAS_GROUP_FUNCTIONS,
    GROUP_GAS_THRESHOLDS,
    GROUP_RECOMMENDATIONS,
    HIGH_BATCH_GAS,
    HIGH_USAGE_RATIO,
    HIGH_USAGE_SUGGESTION,
    MIXED_FUNCTIONS_MESSAGE,
    MODERATE_VARIATION_MESSAGE,
    MODERATE_VARIATION_PERCENT,
    NO_SUCCESSFUL_SIMULATIONS_MESSAGE,
    STRONG_VARIATION_MESSAGE,
    STRONG_VARIATION_PERCENT,
    UNKNOWN_FUNCTION_BASELINE,
    WEI_PER_ETHER,
    WORST_EFFICIENCY_TIER,
)
from simulation.enums.contract_type import FunctionCategory
from simulation.enums.gas_group import EfficiencyTier, GasGroup, GasLevel
from simulation.models.gas_analysis import BatchAnalysis, CategoryAnalysis, GasComparison, GasCost
from simulation.models.result import BatchResult, SimulationResult


class GasMeasurement(Protocol):
    """Anything carrying a function name, outcome flags and a gas figure (SimulationResult, ComparisonResult)."""

    function_name: str
    success: bool
    hypothetical_success: bool
    gas_used: int


def _is_usable(entry: GasMeasurement) -> bool:
    return entry.success or entry.hypothetical_success


class GasAnalyzerService(object):
    @staticmethod
    def group_for(function_name: str, category: Optional[FunctionCategory] = None) -> GasGroup:
        for group, functions in GAS_GROUP_FUNCTIONS.items():
            if function_name in functions:
                return group
        if category is not None:
            return CATEGORY_GAS_GROUP.get(category, GasGroup.OTHER)
        return GasGroup.OTHER

    @staticmethod
    def baseline(function_name: str) -> int:
        return DEFAULT_GAS_LIMITS.get(function_name, UNKNOWN_FUNCTION_BASELINE)

    @staticmethod
    def categorize(function_name: str, gas_used: int) -> EfficiencyTier:
        """Efficiency label from the ratio of `gas_used` to the function's expected gas."""
        ratio = gas_used / GasAnalyzerService.baseline(function_name)
        for upper_bound, tier in EFFICIENCY_RATIO_TIERS:
            if ratio <= upper_bound:
                return tier
        return WORST_EFFICIENCY_TIER

    @staticmethod
    def describe(function_name: str, gas_used: int, category: Optional[FunctionCategory] = None) -> str:
        """`"{group} ({label})"`, e.g. "Basic Transfer (Efficient)"."""
        group = GasAnalyzerService.group_for(function_name, category)
        tier = GasAnalyzerService.categorize(function_name, gas_used)
        return f"{group.value} ({tier.value})"

    @staticmethod
    def group_level(group: GasGroup, average_gas: float) -> GasLevel:
        thresholds = GROUP_GAS_THRESHOLDS.get(group, GROUP_GAS_THRESHOLDS[GasGroup.OTHER])
        if average_gas <= thresholds[GasLevel.HIGH]:
            return GasLevel.HIGH
        if average_gas <= thresholds[GasLevel.MEDIUM]:
            return GasLevel.MEDIUM
        return GasLevel.LOW

    @staticmethod
    def _group_of_result(result: SimulationResult) -> GasGroup:
        try:
            return GasGroup(result.operation_category)
        except ValueError:
            return GasAnalyzerService.group_for(result.function_name)

    @staticmethod
    def analyze_distribution(results: Sequence[SimulationResult]) -> List[CategoryAnalysis]:
        """Per-group share of the total gas, sorted by gas used (largest first)."""
        if not results:
            return []

        total_gas = sum(result.gas_used for result in results)
        groups: Dict[GasGroup, List[SimulationResult]] = defaultdict(list)
        for result in results:
            groups[GasAnalyzerService._group_of_result(result)].append(result)

        analyses = []
        for group, group_results in groups.items():
            group_gas = sum(result.gas_used for result in group_results)
            average_gas = group_gas / len(group_results)
            level = GasAnalyzerService.group_level(group, average_gas)
            recommendation = None
            if level != GasLevel.HIGH:
                recommendation = GROUP_RECOMMENDATIONS.get(group, {}).get(level)

            analyses.append(
                CategoryAnalysis(
                    category=group,
                    gas_used=group_gas,
                    operations=len(group_results),
                    percentage=(group_gas / total_gas * 100) if total_gas else 0.0,
                    average_gas=average_gas,
                    efficiency=level,
                    recommendation=recommendation,
                )
            )

        return sorted(analyses, key=lambda analysis: analysis.gas_used, reverse=True)

    @staticmethod
    def compare(results: Sequence[GasMeasurement]) -> GasComparison:
        """Compares gas across entries that succeeded or would succeed with enough funds."""
        if not results:
            return GasComparison()

        usable = [(index, entry) for index, entry in enumerate(results) if _is_usable(entry)]
        if not usable:
            return GasComparison(recommendations=[NO_SUCCESSFUL_SIMULATIONS_MESSAGE])

        gas_values = [entry.gas_used for _, entry in usable]
        min_gas, max_gas = min(gas_values), max(gas_values)
        most_efficient = next(index for index, entry in usable if entry.gas_used == min_gas)
        least_efficient = next(index for index, entry in usable if entry.gas_used == max_gas)

        recommendations = []
        if len(usable) >= 2 and min_gas > 0:
            variation = (max_gas - min_gas) / min_gas * 100
            if variation > STRONG_VARIATION_PERCENT:
                recommendations.append(STRONG_VARIATION_MESSAGE)
            elif variation > MODERATE_VARIATION_PERCENT:
                recommendations.append(MODERATE_VARIATION_MESSAGE)

        if len({entry.function_name for _, entry in usable}) > 1:
            recommendations.append(MIXED_FUNCTIONS_MESSAGE)

        failed = len(results) - len(usable)
        if failed > 0:
            recommendations.append(FAILED_SIMULATIONS_MESSAGE.format(count=failed))

        return GasComparison(
            most_efficient=most_efficient,
            least_efficient=least_efficient,
            average_gas=sum(gas_values) / len(gas_values),
            min_gas=min_gas,
            max_gas=max_gas,
            recommendations=recommendations,
        )

    @staticmethod
    def cost_of(
        gas_used: int, gas_price_wei: int, reference_price_usd: float = DEFAULT_REFERENCE_PRICE_USD
    ) -> GasCost:
        cost_native = Decimal(gas_used) * Decimal(gas_price_wei) / Decimal(WEI_PER_ETHER)
        return GasCost(
            gas_used=gas_used,
            gas_price_wei=gas_price_wei,
            cost_native=float(cost_native),
            cost_usd=float(cost_native * Decimal(str(reference_price_usd))),
        )

    @staticmethod
    def optimization_suggestions(function_name: str, gas_used: int) -> List[str]:
        expected = DEFAULT_GAS_LIMITS.get(function_name)
        if not expected:
            return []

        ratio = gas_used / expected
        suggestions = []
        if ratio > HIGH_USAGE_RATIO:
            suggestions.append(HIGH_USAGE_SUGGESTION)

        function_hint = FUNCTION_SUGGESTIONS.get(function_name)
        if function_hint is not None:
            threshold, hint = function_hint
            if ratio > threshold:
                suggestions.append(hint)
        return suggestions

    @staticmethod
    def summarize_batch(batch: BatchResult) -> BatchAnalysis:
        operations = batch.operations
        total = len(operations)

        failure_points = [index for index, operation in enumerate(operations) if not operation.is_usable]

        gas_distribution: Dict[str, int] = defaultdict(int)
        operation_types: Dict[str, int] = defaultdict(int)
        for operation in operations:
            gas_distribution[operation.operation_category or GasGroup.OTHER.value] += operation.gas_used
            operation_types[operation.function_name] += 1

        average_gas = batch.total_gas / total if total else 0.0
        gas_efficiency = 0.0
        if total:
            gas_efficiency = max(0.0, 100.0 - average_gas / BATCH_REFERENCE_GAS_PER_OPERATION * 100)

        recommendations = []
        if total and batch.success_rate < 100:
            recommendations.append(BATCH_PARTIAL_FAILURE_MESSAGE)
        if batch.total_gas > HIGH_BATCH_GAS:
            recommendations.append(BATCH_HIGH_GAS_MESSAGE)
        if failure_points:
            recommendations.append(
                BATCH_FAILURE_POSITIONS_MESSAGE.format(positions=", ".join(str(point) for point in failure_points))
            )

        return BatchAnalysis(
            total_operations=total,
            successful_operations=batch.successful_operations,
            failed_operations=total - batch.successful_operations,
            success_rate=batch.success_rate,
            total_gas_used=batch.total_gas,
            average_gas_per_operation=average_gas,
            gas_efficiency=gas_efficiency,
            failure_points=failure_points,
            gas_distribution=dict(gas_distribution),
            operation_types=dict(operation_types),
            recommendations=recommendations,
        )
