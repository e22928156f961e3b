import asyncio
import pytest
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch
from eth_abi import encode

from constants.error_selectors import HYPOTHETICAL_SUCCESS_NOTE
from constants.event_signatures import TRANSFER_EVENT_SIGNATURE
from simulation.enums.error_severity import Severity
from simulation.models.request import BatchOperation, SimulationRequest
from simulation.models.state_change import TransferChange
from simulation.registry.seed_contracts import PYUSD_MAINNET_ADDRESS, USDC_MAINNET_ADDRESS, build_default_registry
from simulation.rpc.rpc_gateway import RpcGateway
from simulation.service.simulation_cache import SimulationCache
from simulation.service.simulation_service import SimulationService
from utils.exceptions import (
    CallRevertedError,
    EncodingError,
    GasEstimationError,
    RpcGatewayError,
    TraceUnavailableError,
    ValidationError,
)

CALLER = "0x742d35Cc6634C0532925a3b844Bc454e4438f44e"
RECIPIENT = "0x0000000000000000000000000000000000000001"
TRUE_OUTPUT = "0x" + encode(["bool"], [True]).hex()


def revert_payload(reason):
    return "0x08c379a0" + encode(["string"], [reason]).hex()


@pytest.fixture
def gateway():
    gateway = MagicMock(spec=RpcGateway)
    gateway.call = AsyncMock(return_value=TRUE_OUTPUT)
    gateway.estimate_gas = AsyncMock(return_value=65000)
    gateway.trace_call = AsyncMock(side_effect=TraceUnavailableError("debug_traceCall unavailable"))
    gateway.close = AsyncMock()
    return gateway


@pytest.fixture
def service(gateway):
    return SimulationService(gateway=gateway, registry=build_default_registry(), cache=SimulationCache())


def transfer_request(amount="10", **overrides):
    fields = dict(function_name="transfer", caller=CALLER, parameters=[RECIPIENT, amount])
    fields.update(overrides)
    return SimulationRequest(**fields)


@pytest.mark.asyncio
async def test_successful_simulation(service, gateway):
    result = await service.simulate(transfer_request())

    assert result.success is True
    assert result.hypothetical_success is False
    assert result.gas_used == 65000
    assert result.gas_category == "Basic Transfer (Efficient)"
    assert result.operation_category == "Basic Transfer"
    assert result.output == TRUE_OUTPUT
    assert result.decoded_output is True
    assert result.error is None
    assert result.contract_address == PYUSD_MAINNET_ADDRESS
    assert result.gas_cost is None

    tx, block = gateway.call.await_args.args
    assert tx["from"] == CALLER
    assert tx["to"].lower() == PYUSD_MAINNET_ADDRESS.lower()
    assert tx["data"].startswith("0xa9059cbb")
    assert int(tx["data"][-64:], 16) == 10_000_000
    assert "gas" not in tx
    assert block == "latest"


@pytest.mark.asyncio
async def test_trace_overrides_gas_and_adds_state_changes(service, gateway):
    log = {
        "address": PYUSD_MAINNET_ADDRESS.lower(),
        "topics": [
            TRANSFER_EVENT_SIGNATURE,
            "0x" + CALLER[2:].lower().rjust(64, "0"),
            "0x" + RECIPIENT[2:].rjust(64, "0"),
        ],
        "data": "0x" + hex(10_000_000)[2:].rjust(64, "0"),
    }
    gateway.trace_call = AsyncMock(return_value={"gasUsed": "0xc350", "calls": [], "logs": [log]})

    result = await service.simulate(transfer_request())

    assert result.gas_used == 50000
    assert result.gas_category == "Basic Transfer (Highly Efficient)"
    assert len(result.state_changes) == 1
    change = result.state_changes[0]
    assert isinstance(change, TransferChange)
    assert change.amount == Decimal(10)
    assert change.from_address == CALLER


@pytest.mark.asyncio
async def test_trace_failure_is_not_fatal(service, gateway):
    result = await service.simulate(transfer_request())

    gateway.trace_call.assert_awaited_once()
    assert result.success is True
    assert result.state_changes == []
    assert result.calls == []


@pytest.mark.asyncio
async def test_gas_price_adds_cost(service, gateway):
    gateway.estimate_gas = AsyncMock(return_value=50000)

    result = await service.simulate(transfer_request(gas_price=20 * 10**9, gas_limit=100000, block=19_000_000))

    assert result.gas_cost.cost_native == pytest.approx(0.001)
    assert result.gas_cost.cost_usd == pytest.approx(2.0)
    tx, block = gateway.call.await_args.args
    assert tx["gas"] == hex(100000)
    assert tx["gasPrice"] == hex(20 * 10**9)
    assert block == hex(19_000_000)


@pytest.mark.asyncio
async def test_balance_revert_is_hypothetical_success(service, gateway):
    gateway.call = AsyncMock(
        side_effect=CallRevertedError("execution reverted", revert_payload("ERC20: transfer amount exceeds balance"))
    )
    gateway.estimate_gas = AsyncMock(side_effect=GasEstimationError("Gas estimation reverted"))

    result = await service.simulate(transfer_request())

    assert result.success is False
    assert result.hypothetical_success is True
    assert result.is_usable
    assert result.note == HYPOTHETICAL_SUCCESS_NOTE
    assert result.error == "ERC20: transfer amount exceeds balance"
    assert result.decoded_error.severity == Severity.HIGH
    # Falls back to the default gas for transfers
    assert result.gas_used == 65000


@pytest.mark.asyncio
async def test_gas_fallback_uses_overrides(gateway):
    service = SimulationService(gateway=gateway, registry=build_default_registry(), default_gas={"transfer": 70000})
    gateway.estimate_gas = AsyncMock(side_effect=GasEstimationError("node unavailable"))

    result = await service.simulate(transfer_request())

    assert result.success is True
    assert result.gas_used == 70000


@pytest.mark.asyncio
async def test_hard_revert(service, gateway):
    gateway.call = AsyncMock(side_effect=CallRevertedError("execution reverted", revert_payload("Pausable: paused")))

    result = await service.simulate(transfer_request())

    assert result.success is False
    assert result.hypothetical_success is False
    assert result.note is None
    assert result.error == "Pausable: paused"
    assert result.gas_used == 0
    gateway.estimate_gas.assert_not_awaited()
    gateway.trace_call.assert_not_awaited()


@pytest.mark.asyncio
async def test_validation_errors_propagate(service, gateway):
    with pytest.raises(ValidationError) as exc_info:
        await service.simulate(transfer_request(amount="-1"))
    assert exc_info.value.reasons[0].startswith("Parameter 2:")

    with pytest.raises(ValidationError, match="Unknown function: selfdestruct"):
        await service.simulate(SimulationRequest(function_name="selfdestruct", caller=CALLER))

    with pytest.raises(ValidationError, match="Unknown contract"):
        await service.simulate(transfer_request(contract_address="0x00000000000000000000000000000000000000ff"))

    gateway.call.assert_not_awaited()


@pytest.mark.asyncio
async def test_encoding_error_propagates(service, gateway):
    service.validator = MagicMock()
    service.validator.validate_request.return_value = MagicMock(is_valid=True, warnings=[], errors=[])

    with pytest.raises(EncodingError):
        await service.simulate(transfer_request(amount="abc"))
    gateway.call.assert_not_awaited()


@pytest.mark.asyncio
async def test_unexpected_error_becomes_failed_result(service, gateway):
    gateway.call = AsyncMock(side_effect=RuntimeError("boom"))

    result = await service.simulate(transfer_request())

    assert result.success is False
    assert result.gas_category == "Error"
    assert result.error == "boom"
    # Not cached, a retry reaches the node again
    await service.simulate(transfer_request())
    assert gateway.call.await_count == 2


@pytest.mark.asyncio
async def test_cancellation_propagates(service, gateway):
    gateway.call = AsyncMock(side_effect=asyncio.CancelledError())

    with pytest.raises(asyncio.CancelledError):
        await service.simulate(transfer_request())


@pytest.mark.asyncio
async def test_results_are_cached(service, gateway):
    first = await service.simulate(transfer_request())
    second = await service.simulate(transfer_request())
    await service.simulate(transfer_request(amount="11"))

    assert first == second
    assert first is not second
    assert gateway.call.await_count == 2
    assert service.cache.stats()["hits"] == 1


@pytest.mark.asyncio
async def test_large_integers_in_cache_key(service, gateway):
    first = await service.simulate(transfer_request(amount=10**20, value=20 * 10**18))
    second = await service.simulate(transfer_request(amount=10**20, value=20 * 10**18))

    assert first.success is True
    assert second == first
    assert gateway.call.await_count == 1
    tx, _ = gateway.call.await_args.args
    assert tx["value"] == hex(20 * 10**18)


@pytest.mark.asyncio
async def test_explicit_contract_address(service, gateway):
    result = await service.simulate(transfer_request(contract_address=USDC_MAINNET_ADDRESS.lower()))

    assert result.contract_address == USDC_MAINNET_ADDRESS
    tx, _ = gateway.call.await_args.args
    assert tx["to"].lower() == USDC_MAINNET_ADDRESS.lower()


@pytest.mark.asyncio
async def test_compare_variants(service, gateway):
    gateway.estimate_gas = AsyncMock(side_effect=[50000, 100000])

    results = await service.compare_variants(
        "transfer", CALLER, [[RECIPIENT, "1"], [RECIPIENT, "2"], ["bad-address", "3"]]
    )

    assert [result.variant for result in results] == ["Variant 1", "Variant 2", "Variant 3"]
    assert [result.relative_gas_cost for result in results] == [1.0, 2.0, None]
    assert results[2].success is False
    assert results[2].gas_category == "Error"
    assert results[2].error.startswith("Invalid parameters: Parameter 1")


@pytest.mark.asyncio
async def test_compare_requires_two_variants(service):
    with pytest.raises(ValidationError, match="At least 2 parameter sets"):
        await service.compare_variants("transfer", CALLER, [[RECIPIENT, "1"]])


@pytest.mark.asyncio
async def test_batch_with_invalid_operation(service, gateway):
    operations = [
        BatchOperation(function_name="transfer", parameters=[RECIPIENT, "1"]),
        BatchOperation(function_name="approve", parameters=[RECIPIENT]),
        BatchOperation(function_name="approve", parameters=[RECIPIENT, "5"]),
    ]
    gateway.estimate_gas = AsyncMock(side_effect=[60000, 45000])

    result = await service.simulate_batch(CALLER, operations)

    assert result.batch_success is False
    assert result.total_operations == 3
    assert result.successful_operations == 2
    assert result.success_rate == pytest.approx(66.67, abs=0.01)
    assert result.total_gas == 105000
    assert [operation.function_name for operation in result.operations] == ["transfer", "approve", "approve"]
    failed = result.operations[1]
    assert failed.success is False
    assert failed.error == "Invalid parameters: Approve requires exactly 2 parameters: spender, amount"


@pytest.mark.asyncio
async def test_empty_batch(service, gateway):
    result = await service.simulate_batch(CALLER, [])

    assert result.batch_success is True
    assert result.success_rate == 0.0
    gateway.call.assert_not_awaited()


@pytest.mark.asyncio
async def test_check_balance(service, gateway):
    gateway.call = AsyncMock(return_value="0x" + encode(["uint256"], [1_500_000]).hex())

    assert await service.check_balance(RECIPIENT) == Decimal("1.5")
    tx, block = gateway.call.await_args.args
    assert tx["data"].startswith("0x70a08231")
    assert "from" not in tx

    gateway.call = AsyncMock(return_value="0x")
    assert await service.check_balance(RECIPIENT) == Decimal(0)

    gateway.call = AsyncMock(side_effect=RpcGatewayError("all providers failed"))
    assert await service.check_balance(RECIPIENT) is None


@pytest.mark.asyncio
async def test_check_allowance(service, gateway):
    gateway.call = AsyncMock(return_value="0x" + encode(["uint256"], [2_000_000]).hex())

    assert await service.check_allowance(CALLER, RECIPIENT, network="sepolia") == Decimal(2)
    tx, _ = gateway.call.await_args.args
    assert tx["data"].startswith("0xdd62ed3e")


@pytest.mark.asyncio
async def test_batch_survives_out_of_range_amount(service, gateway):
    operations = [
        BatchOperation(function_name="transfer", parameters=[RECIPIENT, "1"]),
        BatchOperation(function_name="transfer", parameters=[RECIPIENT, "1e1000000"]),
        BatchOperation(function_name="transfer", parameters=[RECIPIENT, 10**20]),
    ]

    result = await service.simulate_batch(CALLER, operations)

    assert result.total_operations == 3
    assert result.successful_operations == 2
    assert result.batch_success is False
    assert result.operations[1].gas_category == "Error"
    assert "out of range" in result.operations[1].error


@pytest.mark.asyncio
async def test_unexpected_error_fails_only_its_batch_operation(service, gateway):
    operations = [BatchOperation(function_name="transfer", parameters=[RECIPIENT, str(amount)]) for amount in (1, 2, 3)]

    with patch.object(service, "_validate", side_effect=[None, RuntimeError("boom"), None]):
        result = await service.simulate_batch(CALLER, operations)

    assert [operation.success for operation in result.operations] == [True, False, True]
    assert result.operations[1].error == "boom"
    assert result.successful_operations == 2


@pytest.mark.asyncio
async def test_unexpected_error_fails_only_its_variant(service, gateway):
    gateway.estimate_gas = AsyncMock(side_effect=[50000, 100000])

    with patch.object(service, "_validate", side_effect=[None, RuntimeError("boom"), None]):
        results = await service.compare_variants("transfer", CALLER, [[RECIPIENT, "1"], [RECIPIENT, "2"], [RECIPIENT, "3"]])

    assert [result.success for result in results] == [True, False, True]
    assert results[1].error == "boom"
    assert results[1].gas_category == "Error"
    assert [result.relative_gas_cost for result in results] == [1.0, None, 2.0]


@pytest.mark.asyncio
async def test_cached_comparison_is_not_shared_with_callers(service, gateway):
    parameter_sets = [[RECIPIENT, "1"], [RECIPIENT, "2"]]

    first = await service.compare_variants("transfer", CALLER, parameter_sets)
    first.clear()
    second = await service.compare_variants("transfer", CALLER, parameter_sets)

    assert [result.variant for result in second] == ["Variant 1", "Variant 2"]
    assert service.cache.stats()["hits"] >= 1


@pytest.mark.asyncio
async def test_cached_batch_is_not_shared_with_callers(service, gateway):
    operations = [BatchOperation(function_name="transfer", parameters=[RECIPIENT, "1"])]

    first = await service.simulate_batch(CALLER, operations)
    first.operations.clear()
    second = await service.simulate_batch(CALLER, operations)

    assert len(second.operations) == 1
    assert gateway.call.await_count == 1
