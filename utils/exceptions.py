from typing import Any, Dict, List, Optional


class RetriableValueError(ValueError):
    """Raised for JSON-RPC responses that are worth retrying on another node."""
    pass


class SimulationEngineError(Exception):
    """Base exception for the simulation engine."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(SimulationEngineError):
    """
    Blocking validation failure, raised before any network call is made.
    Always carries the list of human readable reasons.
    """

    def __init__(self, reasons: List[str], warnings: Optional[List[str]] = None):
        self.reasons = list(reasons)
        self.warnings = list(warnings or [])
        super().__init__(f"Invalid parameters: {', '.join(self.reasons)}", {"reasons": self.reasons})


class EncodingError(SimulationEngineError):
    """A parameter could not be converted to its wire representation."""
    pass


class ArgumentCountMismatch(EncodingError):
    def __init__(self, function_name: str, expected: int, received: int):
        super().__init__(
            f"Expected {expected} parameters for {function_name}, got {received}",
            {"function": function_name, "expected": expected, "received": received},
        )


class UnsupportedType(EncodingError):
    def __init__(self, abi_type: str):
        super().__init__(f"Unsupported parameter type: {abi_type}", {"type": abi_type})


class InvalidAddress(EncodingError):
    def __init__(self, value: Any):
        super().__init__(f"Invalid address: {value}", {"value": str(value)})


class InvalidNumeric(EncodingError):
    def __init__(self, value: Any, reason: str = "not a valid unsigned integer"):
        super().__init__(f"Invalid numeric value {value!r}: {reason}", {"value": str(value)})


class RpcGatewayError(SimulationEngineError):
    """The remote node could not serve a request."""
    pass


class CallRevertedError(RpcGatewayError):
    """The speculative call reverted. `data` holds the raw revert payload, if the node returned one."""

    def __init__(self, message: str, data: Optional[str] = None, code: Optional[int] = None):
        super().__init__(message, {"data": data, "code": code})
        self.data = data
        self.code = code

    def full_text(self) -> str:
        if self.data and self.data not in self.message:
            return f"{self.message} (data={self.data})"
        return self.message


class GasEstimationError(RpcGatewayError):
    pass


class TraceUnavailableError(RpcGatewayError):
    """debug_traceCall is unsupported by the node or failed for every request format."""
    pass
