from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from simulation.models.decoded_error import DecodedError
from simulation.models.gas_analysis import GasCost
from simulation.models.state_change import StateChange


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SimulationResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: str = "simulation_result"

    # Outcome
    success: bool = False
    hypothetical_success: bool = False
    note: Optional[str] = None

    # Gas
    gas_used: int = 0
    gas_category: str = ""              # e.g. "Basic Transfer (Efficient)"
    operation_category: str = ""        # e.g. "Basic Transfer"
    gas_cost: Optional[GasCost] = None

    # Output / failure
    output: Optional[str] = None
    decoded_output: Any = None
    error: Optional[str] = None
    decoded_error: Optional[DecodedError] = None

    # Trace detail
    state_changes: List[StateChange] = Field(default_factory=list)
    calls: List[Dict[str, Any]] = Field(default_factory=list)

    timestamp: datetime = Field(default_factory=_utc_now)

    # Echo of the request
    function_name: str
    caller: str
    parameters: List[Any] = Field(default_factory=list)
    network: str
    contract_address: Optional[str] = None
    block: Union[str, int] = "latest"

    @property
    def is_usable(self) -> bool:
        """True when the call succeeded or would succeed with enough balance/allowance."""
        return self.success or self.hypothetical_success


class ComparisonResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    variant: str
    function_name: str
    parameters: List[Any] = Field(default_factory=list)
    success: bool = False
    hypothetical_success: bool = False
    gas_used: int = 0
    gas_category: str = ""
    error: Optional[str] = None
    relative_gas_cost: Optional[float] = None

    @property
    def is_usable(self) -> bool:
        return self.success or self.hypothetical_success


class BatchResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    operations: List[SimulationResult] = Field(default_factory=list)
    total_gas: int = 0
    successful_operations: int = 0
    batch_success: bool = True
    success_rate: float = 0.0

    @property
    def total_operations(self) -> int:
        return len(self.operations)
