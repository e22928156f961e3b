import pytest

from simulation.enums.contract_type import FunctionCategory
from simulation.enums.gas_group import EfficiencyTier, GasGroup, GasLevel
from simulation.models.result import BatchResult, ComparisonResult, SimulationResult
from simulation.service.gas_analyzer_service import GasAnalyzerService

CALLER = "0x742d35Cc6634C0532925a3b844Bc454e4438f44e"


def make_result(function_name, gas_used, success=True, hypothetical_success=False, operation_category=""):
    return SimulationResult(
        success=success,
        hypothetical_success=hypothetical_success,
        gas_used=gas_used,
        operation_category=operation_category,
        function_name=function_name,
        caller=CALLER,
        network="mainnet",
    )


@pytest.mark.parametrize(
    "gas_used, tier",
    [
        (65000, EfficiencyTier.EFFICIENT),          # 1.0x
        (51350, EfficiencyTier.HIGHLY_EFFICIENT),   # 0.79x
        (52000, EfficiencyTier.HIGHLY_EFFICIENT),   # 0.8x
        (84500, EfficiencyTier.MODERATE),           # 1.3x
        (104000, EfficiencyTier.HIGH_GAS),          # 1.6x
        (104650, EfficiencyTier.VERY_HIGH_GAS),     # 1.61x
    ],
)
def test_categorize_boundaries(gas_used, tier):
    assert GasAnalyzerService.categorize("transfer", gas_used) == tier


def test_unknown_function_uses_generic_baseline():
    assert GasAnalyzerService.baseline("blacklist") == 50000
    assert GasAnalyzerService.categorize("blacklist", 50000) == EfficiencyTier.EFFICIENT


def test_describe_combines_group_and_label():
    assert GasAnalyzerService.describe("transfer", 65000) == "Basic Transfer (Efficient)"
    assert GasAnalyzerService.describe("balanceOf", 20000) == "Query (Highly Efficient)"
    assert GasAnalyzerService.describe("blacklist", 90000, FunctionCategory.ADMIN) == "Administrative (Very High Gas)"
    assert GasAnalyzerService.describe("somethingElse", 10000) == "Other Operation (Highly Efficient)"


def test_group_level_thresholds():
    assert GasAnalyzerService.group_level(GasGroup.BASIC_TRANSFER, 50000) == GasLevel.HIGH
    assert GasAnalyzerService.group_level(GasGroup.BASIC_TRANSFER, 50001) == GasLevel.MEDIUM
    assert GasAnalyzerService.group_level(GasGroup.BASIC_TRANSFER, 70001) == GasLevel.LOW


def test_analyze_distribution():
    results = [
        make_result("transfer", 60000, operation_category="Basic Transfer"),
        make_result("transfer", 80000, operation_category="Basic Transfer"),
        make_result("approve", 40000),
    ]

    analyses = GasAnalyzerService.analyze_distribution(results)

    assert [analysis.category for analysis in analyses] == [GasGroup.BASIC_TRANSFER, GasGroup.AUTHORIZATION]
    transfers = analyses[0]
    assert transfers.gas_used == 140000
    assert transfers.operations == 2
    assert transfers.average_gas == 70000
    assert transfers.percentage == pytest.approx(140000 / 180000 * 100)
    assert transfers.efficiency == GasLevel.MEDIUM
    assert transfers.recommendation == "Consider batching multiple transfers to reduce per-transaction overhead"
    assert analyses[1].efficiency == GasLevel.HIGH
    assert analyses[1].recommendation is None


def test_analyze_distribution_with_zero_gas():
    analyses = GasAnalyzerService.analyze_distribution([make_result("transfer", 0, success=False)])
    assert analyses[0].percentage == 0.0
    assert GasAnalyzerService.analyze_distribution([]) == []


def test_compare_variants():
    results = [
        ComparisonResult(variant="Variant 1", function_name="transfer", success=True, gas_used=50000),
        ComparisonResult(variant="Variant 2", function_name="transfer", success=True, gas_used=100000),
        ComparisonResult(variant="Variant 3", function_name="transfer", error="reverted"),
    ]

    comparison = GasAnalyzerService.compare(results)

    assert comparison.most_efficient == 0
    assert comparison.least_efficient == 1
    assert comparison.min_gas == 50000
    assert comparison.max_gas == 100000
    assert comparison.average_gas == 75000
    assert comparison.recommendations == [
        "Significant gas variation detected. Consider using the most efficient variant.",
        "1 simulation(s) failed. Address the underlying issues to avoid wasted gas.",
    ]


def test_compare_moderate_variation_and_mixed_functions():
    results = [
        make_result("transfer", 60000),
        make_result("approve", 75000, success=False, hypothetical_success=True),
    ]

    comparison = GasAnalyzerService.compare(results)

    assert comparison.recommendations == [
        "Moderate gas differences found. Review parameters for optimization opportunities.",
        "Different function types have varying gas costs. Choose the most appropriate method for your use case.",
    ]


def test_compare_without_usable_results():
    comparison = GasAnalyzerService.compare([make_result("transfer", 0, success=False)])
    assert comparison.most_efficient is None
    assert comparison.recommendations == ["No successful simulations to compare"]
    assert GasAnalyzerService.compare([]).recommendations == []


def test_cost_of():
    cost = GasAnalyzerService.cost_of(21000, 20 * 10**9, reference_price_usd=2000)
    assert cost.cost_native == pytest.approx(0.00042)
    assert cost.cost_usd == pytest.approx(0.84)


def test_optimization_suggestions():
    assert GasAnalyzerService.optimization_suggestions("transfer", 65000) == []
    assert GasAnalyzerService.optimization_suggestions("transfer", 80000) == [
        "Consider checking recipient address validity before transaction."
    ]
    assert len(GasAnalyzerService.optimization_suggestions("transfer", 100000)) == 2
    assert GasAnalyzerService.optimization_suggestions("blacklist", 1_000_000) == []


def test_summarize_batch():
    operations = [
        make_result("transfer", 60000, operation_category="Basic Transfer"),
        make_result("approve", 0, success=False, operation_category="Authorization"),
        make_result("transfer", 40000, operation_category="Basic Transfer"),
    ]
    batch = BatchResult(
        operations=operations,
        total_gas=100000,
        successful_operations=2,
        batch_success=False,
        success_rate=2 / 3 * 100,
    )

    analysis = GasAnalyzerService.summarize_batch(batch)

    assert analysis.total_operations == 3
    assert analysis.failed_operations == 1
    assert analysis.failure_points == [1]
    assert analysis.gas_distribution == {"Basic Transfer": 100000, "Authorization": 0}
    assert analysis.operation_types == {"transfer": 2, "approve": 1}
    assert analysis.average_gas_per_operation == pytest.approx(100000 / 3)
    assert analysis.gas_efficiency == pytest.approx(100 - (100000 / 3) / 100000 * 100)
    assert analysis.recommendations == [
        "Some operations failed - check parameters and balances",
        "Operations failed at positions: 1",
    ]


def test_summarize_empty_batch():
    analysis = GasAnalyzerService.summarize_batch(BatchResult())
    assert analysis.total_operations == 0
    assert analysis.gas_efficiency == 0.0
    assert analysis.recommendations == []
