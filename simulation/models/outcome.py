from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from simulation.models.decoded_error import DecodedError
from simulation.models.state_change import StateChange


class CallOutcome(BaseModel):
    """Result of the eth_call step: either output (success) or a decoded failure."""

    model_config = ConfigDict(frozen=True)

    success: bool
    output: Optional[str] = None
    decoded_output: Any = None
    decoded_error: Optional[DecodedError] = None
    error: Optional[str] = None
    hypothetical_success: bool = False
    note: Optional[str] = None

    @property
    def is_usable(self) -> bool:
        return self.success or self.hypothetical_success


class TraceOutcome(BaseModel):
    """Best-effort trace detail; `available` is False when the node could not trace the call."""

    model_config = ConfigDict(frozen=True)

    available: bool = False
    gas_used: Optional[int] = None
    calls: List[Dict[str, Any]] = Field(default_factory=list)
    state_changes: List[StateChange] = Field(default_factory=list)
