from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Dict, Mapping, Optional, Sequence

from eth_utils import is_address

from constants.event_signatures import ZERO_ADDRESS
from constants.function_signatures import ADDRESS_SENSITIVE_FUNCTIONS
from constants.networks import NETWORKS
from simulation.codec.abi_codec import AbiCodec
from simulation.models.contract import FunctionSignature
from simulation.models.request import BatchOperation, SimulationRequest
from simulation.models.validation import ValidationOutcome
from utils.exceptions import EncodingError
from utils.validation_utils import validate_block_reference

MAX_GAS_LIMIT = 30_000_000
MAX_COMPARISON_VARIANTS = 10
MAX_BATCH_SIZE = 50
MIN_COMPARISON_VARIANTS = 2

COMPARISON_TOO_FEW_VARIANTS = "At least 2 parameter sets are required for comparison"

FunctionRule = Callable[[FunctionSignature, Sequence[Any]], ValidationOutcome]


def arity_rule(label: str, parameter_names: Sequence[str]) -> FunctionRule:
    """Requires exactly `len(parameter_names)` arguments, e.g. "Transfer requires exactly 2 parameters: to, amount"."""

    def rule(signature: FunctionSignature, args: Sequence[Any]) -> ValidationOutcome:
        if len(args) != len(parameter_names):
            return ValidationOutcome(
                errors=[
                    f"{label} requires exactly {len(parameter_names)} parameters: {', '.join(parameter_names)}"
                ]
            )
        return ValidationOutcome()

    return rule


def _transfer_from_rule(signature: FunctionSignature, args: Sequence[Any]) -> ValidationOutcome:
    outcome = arity_rule("TransferFrom", ("from", "to", "amount"))(signature, args)
    if outcome.errors:
        return outcome
    sender, recipient = args[0], args[1]
    if isinstance(sender, str) and isinstance(recipient, str) and sender.lower() == recipient.lower():
        outcome.warnings.append("Sender and recipient are the same address")
    return outcome


def default_rule(signature: FunctionSignature, args: Sequence[Any]) -> ValidationOutcome:
    if len(args) != len(signature.param_types):
        return ValidationOutcome(
            errors=[f"Function {signature.name} expects {len(signature.param_types)} parameters, got {len(args)}"]
        )
    return ValidationOutcome()


FUNCTION_RULES: Dict[str, FunctionRule] = {
    "transfer": arity_rule("Transfer", ("to", "amount")),
    "transferFrom": _transfer_from_rule,
    "approve": arity_rule("Approve", ("spender", "amount")),
    "mint": arity_rule("Mint", ("to", "amount")),
    "burn": arity_rule("Burn", ("amount",)),
    "burnFrom": arity_rule("BurnFrom", ("account", "amount")),
    "increaseAllowance": arity_rule("IncreaseAllowance", ("spender", "addedValue")),
    "decreaseAllowance": arity_rule("DecreaseAllowance", ("spender", "subtractedValue")),
}


def _as_decimal(value: Any) -> Optional[Decimal]:
    try:
        return Decimal(str(value).strip())
    except InvalidOperation:
        return None


class ValidatorService(object):
    """
    Pre-flight checks run before any network call.
    Errors block the simulation, warnings are advisory.
    """

    def __init__(self, large_amount_threshold: int = 1_000_000_000, rules: Optional[Mapping[str, FunctionRule]] = None):
        self.large_amount_threshold = large_amount_threshold
        self.rules: Dict[str, FunctionRule] = dict(FUNCTION_RULES if rules is None else rules)

    def register_rule(self, function_name: str, rule: FunctionRule) -> None:
        self.rules[function_name] = rule

    def validate(self, signature: FunctionSignature, args: Sequence[Any], decimals: int = 18) -> ValidationOutcome:
        rule = self.rules.get(signature.name, default_rule)
        outcome = rule(signature, args)
        if outcome.errors:
            return outcome

        # A rule may accept a different arity than declared; the codec cannot
        if len(args) != len(signature.param_types):
            return outcome.merge(default_rule(signature, args))

        for index, (abi_type, value) in enumerate(zip(signature.param_types, args)):
            outcome = outcome.merge(self._validate_parameter(signature, index, abi_type, value, decimals))
        return outcome

    def _validate_parameter(
        self, signature: FunctionSignature, index: int, abi_type: str, value: Any, decimals: int
    ) -> ValidationOutcome:
        position = index + 1
        is_amount = signature.is_amount_param(index)
        try:
            AbiCodec.to_param_value(abi_type, value, decimals, is_amount)
        except EncodingError as e:
            return ValidationOutcome(errors=[f"Parameter {position}: {e.message}"])

        warnings = []
        if abi_type == "address" and value.lower() == ZERO_ADDRESS and signature.name in ADDRESS_SENSITIVE_FUNCTIONS:
            warnings.append(f"Parameter {position}: Using zero address")

        if is_amount:
            amount = _as_decimal(value)
            if amount is not None and amount == 0:
                warnings.append(f"Parameter {position}: Amount is zero")
            elif amount is not None and amount > self.large_amount_threshold:
                warnings.append(f"Parameter {position}: Very large amount, please verify")

        return ValidationOutcome(warnings=warnings)

    @staticmethod
    def validate_block_reference(block: Any) -> ValidationOutcome:
        try:
            validate_block_reference(block)
        except ValueError as e:
            return ValidationOutcome(errors=[str(e)])
        return ValidationOutcome()

    @staticmethod
    def validate_caller(caller: Any) -> ValidationOutcome:
        if not caller:
            return ValidationOutcome(errors=["From address is required"])
        if not isinstance(caller, str) or not is_address(caller):
            return ValidationOutcome(errors=["Invalid from address format"])
        return ValidationOutcome()

    def validate_request(
        self, request: SimulationRequest, signature: FunctionSignature, decimals: int = 18
    ) -> ValidationOutcome:
        outcome = self.validate_caller(request.caller)

        if request.gas_limit is not None:
            if request.gas_limit <= 0:
                outcome.errors.append("Gas limit must be a positive number")
            elif request.gas_limit > MAX_GAS_LIMIT:
                outcome.warnings.append("Gas limit is very high, transaction may fail")

        if request.gas_price is not None and request.gas_price <= 0:
            outcome.errors.append("Gas price must be a positive number")

        if request.value < 0:
            outcome.errors.append("Value must be a non-negative number")

        if request.network not in NETWORKS:
            outcome.errors.append(f"Unknown network: {request.network}")

        outcome = outcome.merge(self.validate_block_reference(request.block))
        return outcome.merge(self.validate(signature, request.parameters, decimals))

    def validate_batch(
        self, operations: Sequence[BatchOperation], functions: Mapping[str, FunctionSignature], decimals: int = 18
    ) -> ValidationOutcome:
        if not operations:
            return ValidationOutcome(errors=["At least one operation is required"])

        outcome = ValidationOutcome()
        if len(operations) > MAX_BATCH_SIZE:
            outcome.warnings.append("Large batch size may cause performance issues")

        for index, operation in enumerate(operations, start=1):
            signature = functions.get(operation.function_name)
            if signature is None:
                outcome.errors.append(f"Operation {index}: Unknown function: {operation.function_name}")
                continue
            item = self.validate(signature, operation.parameters, decimals)
            outcome.errors.extend(f"Operation {index}: {error}" for error in item.errors)
            outcome.warnings.extend(f"Operation {index}: {warning}" for warning in item.warnings)
        return outcome

    def validate_comparison(
        self,
        signature: FunctionSignature,
        caller: str,
        parameter_sets: Sequence[Sequence[Any]],
        decimals: int = 18,
    ) -> ValidationOutcome:
        outcome = self.validate_caller(caller)
        if len(parameter_sets) < MIN_COMPARISON_VARIANTS:
            outcome.errors.append(COMPARISON_TOO_FEW_VARIANTS)
            return outcome
        if len(parameter_sets) > MAX_COMPARISON_VARIANTS:
            outcome.warnings.append("Large number of variants may affect performance")

        for index, parameters in enumerate(parameter_sets, start=1):
            item = self.validate(signature, parameters, decimals)
            outcome.errors.extend(f"Parameter set {index}: {error}" for error in item.errors)
            outcome.warnings.extend(f"Parameter set {index}: {warning}" for warning in item.warnings)
        return outcome
