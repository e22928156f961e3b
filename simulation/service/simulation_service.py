from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from eth_utils import to_checksum_address

from constants.error_selectors import HYPOTHETICAL_SUCCESS_NOTE
from constants.gas_constants import DEFAULT_GAS_BY_CATEGORY, DEFAULT_REFERENCE_PRICE_USD
from constants.networks import DEFAULT_NETWORK
from simulation.codec.abi_codec import AbiCodec
from simulation.enums.cache_kind import CacheKind
from simulation.enums.contract_type import FunctionCategory
from simulation.models.contract import ContractDescriptor, FunctionSignature
from simulation.models.outcome import CallOutcome, TraceOutcome
from simulation.models.request import BatchOperation, SimulationRequest
from simulation.models.result import BatchResult, ComparisonResult, SimulationResult
from simulation.registry.contract_registry import ContractRegistry
from simulation.rpc.rpc_gateway import RpcGateway
from simulation.service.error_decoder_service import ErrorDecoderService
from simulation.service.gas_analyzer_service import GasAnalyzerService
from simulation.service.simulation_cache import SimulationCache
from simulation.service.state_change_service import StateChangeService
from simulation.service.validator_service import COMPARISON_TOO_FEW_VARIANTS, MIN_COMPARISON_VARIANTS, ValidatorService
from utils.exceptions import CallRevertedError, EncodingError, RpcGatewayError, ValidationError
from utils.formatter_utils import hex_to_dec, strip_0x, to_hex_quantity
from utils.logger_utils import get_logger
from utils.validation_utils import to_rpc_block

logger = get_logger("Simulation Service")

FAILED_GAS_CATEGORY = "Error"


class SimulationService(object):
    """
    Runs speculative calls against a node and turns the outcome into SimulationResults.

    Each simulation is a fixed pipeline: validate, encode, call, estimate gas,
    trace, categorize. Only ValidationError and EncodingError reach the caller
    of `simulate`; every other failure ends up in the returned result.
    """

    def __init__(
        self,
        gateway: RpcGateway,
        registry: ContractRegistry,
        cache: Optional[SimulationCache] = None,
        validator: Optional[ValidatorService] = None,
        default_network: str = DEFAULT_NETWORK,
        default_gas: Optional[Mapping[Union[FunctionCategory, str], int]] = None,
        reference_price_usd: float = DEFAULT_REFERENCE_PRICE_USD,
        trace_enabled: bool = True,
    ):
        self.gateway = gateway
        self.registry = registry
        self.cache = cache
        self.validator = validator or ValidatorService()
        self.default_network = default_network
        self.default_gas: Dict[FunctionCategory, int] = dict(DEFAULT_GAS_BY_CATEGORY)
        for category, gas in (default_gas or {}).items():
            self.default_gas[FunctionCategory(category)] = gas
        self.reference_price_usd = reference_price_usd
        self.trace_enabled = trace_enabled

    # Resolution

    def resolve_contract(self, network: str, contract_address: Optional[str] = None) -> ContractDescriptor:
        if contract_address:
            contract = self.registry.lookup(contract_address, network)
            if contract is None:
                raise ValidationError([f"Unknown contract {contract_address} on {network}"])
            return contract

        contract = self.registry.default_for(network)
        if contract is None:
            raise ValidationError([f"No contract registered for network {network}"])
        return contract

    @staticmethod
    def resolve_function(contract: ContractDescriptor, function_name: str) -> FunctionSignature:
        if not function_name:
            raise ValidationError(["Function name is required"])
        signature = contract.function(function_name)
        if signature is None:
            raise ValidationError([f"Unknown function: {function_name}"])
        return signature

    # Pipeline steps

    def _validate(self, request: SimulationRequest, contract: ContractDescriptor, signature: FunctionSignature) -> None:
        outcome = self.validator.validate_request(request, signature, contract.decimals)
        for warning in outcome.warnings:
            logger.warning(f"{request.function_name}: {warning}")
        if not outcome.is_valid:
            raise ValidationError(outcome.errors, outcome.warnings)

    @staticmethod
    def _build_tx(request: SimulationRequest, contract: ContractDescriptor, call_data: str) -> Dict[str, Any]:
        tx: Dict[str, Any] = {
            "from": to_checksum_address(request.caller),
            "to": to_checksum_address(contract.address),
            "data": call_data,
        }
        if request.gas_limit:
            tx["gas"] = to_hex_quantity(request.gas_limit)
        if request.gas_price:
            tx["gasPrice"] = to_hex_quantity(request.gas_price)
        if request.value > 0:
            tx["value"] = to_hex_quantity(request.value)
        return tx

    async def _call(
        self, tx: Dict[str, Any], block: str, signature: FunctionSignature, contract: ContractDescriptor
    ) -> CallOutcome:
        logger.info(f"Executing eth_call simulation of {signature.name} on {contract.symbol}...")
        try:
            output = await self.gateway.call(tx, block)
        except CallRevertedError as e:
            return self._failed_call(e)

        decoded = AbiCodec.decode_output(signature, output, contract.decimals)
        return CallOutcome(
            success=True,
            output=output,
            decoded_output=None if decoded is None or decoded == output else decoded,
        )

    @staticmethod
    def _failed_call(error: CallRevertedError) -> CallOutcome:
        decoded_error = ErrorDecoderService.decode(error.message, error.data)
        evidence = " ".join(part for part in (error.message, error.data, decoded_error.decoded_message) if part)
        hypothetical = ErrorDecoderService.is_hypothetical_success(evidence)
        logger.info(f"Call reverted: {decoded_error.decoded_message or error.message} (hypothetical={hypothetical})")
        return CallOutcome(
            success=False,
            decoded_error=decoded_error,
            error=ErrorDecoderService.format_for_display(decoded_error),
            hypothetical_success=hypothetical,
            note=HYPOTHETICAL_SUCCESS_NOTE if hypothetical else None,
        )

    async def _estimate_gas(self, tx: Dict[str, Any], signature: FunctionSignature) -> int:
        logger.info("Estimating gas usage...")
        estimate_tx = {key: value for key, value in tx.items() if key != "value"}
        try:
            return await self.gateway.estimate_gas(estimate_tx)
        except RpcGatewayError as e:
            fallback = self.default_gas[signature.category]
            logger.warning(f"Gas estimation failed ({e.message}), using default {fallback} for {signature.category.value}")
            return fallback

    async def _trace(self, tx: Dict[str, Any], block: str, contract: ContractDescriptor) -> TraceOutcome:
        if not self.trace_enabled:
            return TraceOutcome()

        logger.info("Attempting detailed trace analysis...")
        try:
            frame = await self.gateway.trace_call(tx, block)
        except RpcGatewayError as e:
            logger.warning(f"Trace analysis failed: {e.message}")
            return TraceOutcome()

        try:
            logs = StateChangeService.collect_logs(frame)
            return TraceOutcome(
                available=True,
                gas_used=hex_to_dec(frame.get("gasUsed")),
                calls=list(frame.get("calls") or []),
                state_changes=StateChangeService.extract_state_changes(logs, contract),
            )
        except (AttributeError, TypeError, ValueError) as e:
            logger.warning(f"Trace result could not be read: {e}")
            return TraceOutcome()

    def _categorize(self, signature: FunctionSignature, gas_used: int) -> str:
        return GasAnalyzerService.describe(signature.name, gas_used, signature.category)

    # Public operations

    @staticmethod
    def _cache_args(contract: ContractDescriptor, request: SimulationRequest) -> Dict[str, Any]:
        return {
            "contract": contract.address.lower(),
            "parameters": request.parameters,
            "gas_limit": request.gas_limit,
            "gas_price": request.gas_price,
            "value": request.value,
        }

    async def simulate(self, request: SimulationRequest) -> SimulationResult:
        """
        Simulates one call.

        Raises:
            ValidationError: unknown contract/function or blocking parameter errors.
            EncodingError: a parameter cannot be encoded.
        """
        contract = self.resolve_contract(request.network, request.contract_address)
        signature = self.resolve_function(contract, request.function_name)
        self._validate(request, contract, signature)
        call_data = AbiCodec.encode(signature, request.parameters, contract.decimals)

        echo = {
            "function_name": request.function_name,
            "caller": request.caller,
            "parameters": list(request.parameters),
            "network": request.network,
            "contract_address": contract.address,
            "block": request.block,
        }
        operation_category = GasAnalyzerService.group_for(signature.name, signature.category).value

        cache_key = None
        try:
            if self.cache is not None:
                cache_key = SimulationCache.make_key(
                    CacheKind.SIMULATION,
                    request.function_name,
                    request.caller.lower(),
                    self._cache_args(contract, request),
                    request.network,
                    request.block,
                )
                cached = self.cache.get(CacheKind.SIMULATION, cache_key)
                if cached is not None:
                    logger.debug(f"Cache hit for {cache_key}")
                    return cached

            block = to_rpc_block(request.block)
            tx = self._build_tx(request, contract, call_data)
            call = await self._call(tx, block, signature, contract)

            gas_used = 0
            trace = TraceOutcome()
            if call.is_usable:
                gas_used = await self._estimate_gas(tx, signature)
                trace = await self._trace(tx, block, contract)
                if trace.gas_used:
                    gas_used = trace.gas_used

            result = SimulationResult(
                success=call.success,
                hypothetical_success=call.hypothetical_success,
                note=call.note,
                gas_used=gas_used,
                gas_category=self._categorize(signature, gas_used),
                operation_category=operation_category,
                gas_cost=self._cost(gas_used, request.gas_price),
                output=call.output,
                decoded_output=call.decoded_output,
                error=call.error,
                decoded_error=call.decoded_error,
                state_changes=trace.state_changes,
                calls=trace.calls,
                **echo,
            )
        except Exception as e:
            logger.exception(f"Simulation of {request.function_name} failed unexpectedly")
            return SimulationResult(
                success=False,
                gas_category=FAILED_GAS_CATEGORY,
                operation_category=operation_category,
                error=str(e),
                **echo,
            )

        if self.cache is not None:
            self.cache.put(CacheKind.SIMULATION, cache_key, result, request.network)
        return result

    def _cost(self, gas_used: int, gas_price: Optional[int]):
        if not gas_price or gas_used <= 0:
            return None
        return GasAnalyzerService.cost_of(gas_used, gas_price, self.reference_price_usd)

    def _failed_result(
        self, function_name: str, caller: str, parameters: Sequence[Any], network: str, contract_address: Optional[str], error: str
    ) -> SimulationResult:
        return SimulationResult(
            success=False,
            gas_category=FAILED_GAS_CATEGORY,
            operation_category=GasAnalyzerService.group_for(function_name).value,
            error=error,
            function_name=function_name,
            caller=caller,
            parameters=list(parameters),
            network=network,
            contract_address=contract_address,
        )

    async def compare_variants(
        self,
        function_name: str,
        caller: str,
        parameter_sets: Sequence[Sequence[Any]],
        network: Optional[str] = None,
        contract_address: Optional[str] = None,
    ) -> List[ComparisonResult]:
        """Simulates the same function once per parameter set, one after another, in input order."""
        network = network or self.default_network
        if len(parameter_sets) < MIN_COMPARISON_VARIANTS:
            raise ValidationError([COMPARISON_TOO_FEW_VARIANTS])

        cache_key = None
        if self.cache is not None:
            cache_key = SimulationCache.make_key(
                CacheKind.COMPARISON,
                function_name,
                caller.lower(),
                {"contract": (contract_address or "").lower(), "parameter_sets": parameter_sets},
                network,
            )
            cached = self.cache.get(CacheKind.COMPARISON, cache_key)
            if cached is not None:
                return cached

        results: List[ComparisonResult] = []
        for index, parameters in enumerate(parameter_sets, start=1):
            variant = f"Variant {index}"
            request = SimulationRequest(
                function_name=function_name,
                caller=caller,
                parameters=list(parameters),
                network=network,
                contract_address=contract_address,
            )
            try:
                simulation = await self.simulate(request)
            except (ValidationError, EncodingError) as e:
                logger.warning(f"{variant} rejected: {e.message}")
                results.append(self._failed_variant(variant, function_name, parameters, e.message))
                continue
            except Exception as e:
                logger.exception(f"{variant} failed unexpectedly")
                results.append(self._failed_variant(variant, function_name, parameters, str(e)))
                continue

            results.append(
                ComparisonResult(
                    variant=variant,
                    function_name=function_name,
                    parameters=list(parameters),
                    success=simulation.success,
                    hypothetical_success=simulation.hypothetical_success,
                    gas_used=simulation.gas_used,
                    gas_category=simulation.gas_category,
                    error=simulation.error,
                )
            )

        results = self._with_relative_gas_cost(results)
        if self.cache is not None:
            self.cache.put(CacheKind.COMPARISON, cache_key, results, network)
        return results

    @staticmethod
    def _failed_variant(variant: str, function_name: str, parameters: Sequence[Any], error: str) -> ComparisonResult:
        return ComparisonResult(
            variant=variant,
            function_name=function_name,
            parameters=list(parameters),
            gas_category=FAILED_GAS_CATEGORY,
            error=error,
        )

    @staticmethod
    def _with_relative_gas_cost(results: List[ComparisonResult]) -> List[ComparisonResult]:
        measured = [result for result in results if result.is_usable and result.gas_used > 0]
        if len([result for result in results if result.is_usable]) < 2 or not measured:
            return results

        min_gas = min(result.gas_used for result in measured)
        return [
            result.model_copy(update={"relative_gas_cost": result.gas_used / min_gas})
            if result.is_usable and result.gas_used > 0
            else result
            for result in results
        ]

    async def simulate_batch(
        self,
        caller: str,
        operations: Sequence[BatchOperation],
        network: Optional[str] = None,
        contract_address: Optional[str] = None,
    ) -> BatchResult:
        """
        Simulates operations one after another. A failing operation never aborts
        the batch; it is recorded as a failed result in its position.
        """
        network = network or self.default_network

        cache_key = None
        if self.cache is not None:
            cache_key = SimulationCache.make_key(
                CacheKind.BATCH,
                "batch",
                caller.lower(),
                {
                    "contract": (contract_address or "").lower(),
                    "operations": [operation.model_dump() for operation in operations],
                },
                network,
            )
            cached = self.cache.get(CacheKind.BATCH, cache_key)
            if cached is not None:
                return cached

        results: List[SimulationResult] = []
        total_gas = 0
        successful_operations = 0
        batch_success = True

        for index, operation in enumerate(operations, start=1):
            request = SimulationRequest(
                function_name=operation.function_name,
                caller=caller,
                parameters=list(operation.parameters),
                network=network,
                contract_address=contract_address,
            )
            try:
                simulation = await self.simulate(request)
            except (ValidationError, EncodingError) as e:
                logger.warning(f"Batch operation {index} rejected: {e.message}")
                simulation = self._failed_result(
                    operation.function_name, caller, operation.parameters, network, contract_address, e.message
                )
            except Exception as e:
                logger.exception(f"Batch operation {index} failed unexpectedly")
                simulation = self._failed_result(
                    operation.function_name, caller, operation.parameters, network, contract_address, str(e)
                )

            results.append(simulation)
            if simulation.is_usable:
                total_gas += simulation.gas_used
                successful_operations += 1
            else:
                batch_success = False
                logger.warning(f"Batch operation {index} failed: {simulation.error}")

        success_rate = (successful_operations / len(operations) * 100) if operations else 0.0
        result = BatchResult(
            operations=results,
            total_gas=total_gas,
            successful_operations=successful_operations,
            batch_success=batch_success,
            success_rate=success_rate,
        )
        if self.cache is not None:
            self.cache.put(CacheKind.BATCH, cache_key, result, network)
        return result

    async def _read(
        self,
        function_name: str,
        args: Sequence[Any],
        network: Optional[str],
        contract_address: Optional[str],
        block: Union[str, int],
    ) -> Optional[Decimal]:
        contract = self.resolve_contract(network or self.default_network, contract_address)
        signature = self.resolve_function(contract, function_name)
        call_data = AbiCodec.encode(signature, args, contract.decimals)
        try:
            output = await self.gateway.call({"to": to_checksum_address(contract.address), "data": call_data}, to_rpc_block(block))
        except RpcGatewayError as e:
            logger.warning(f"Failed to read {function_name}: {e.message}")
            return None

        if not output or strip_0x(output) == "":
            return Decimal(0)
        decoded = AbiCodec.decode_output(signature, output, contract.decimals)
        return decoded if isinstance(decoded, Decimal) else None

    async def check_balance(
        self,
        address: str,
        network: Optional[str] = None,
        contract_address: Optional[str] = None,
        block: Union[str, int] = "latest",
    ) -> Optional[Decimal]:
        """Token balance of `address` in token units; None when the node cannot answer."""
        return await self._read("balanceOf", [address], network, contract_address, block)

    async def check_allowance(
        self,
        owner: str,
        spender: str,
        network: Optional[str] = None,
        contract_address: Optional[str] = None,
        block: Union[str, int] = "latest",
    ) -> Optional[Decimal]:
        return await self._read("allowance", [owner, spender], network, contract_address, block)
