from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from constants.networks import DEFAULT_NETWORK


class SimulationRequest(BaseModel):
    """A single speculative call: `function_name(*parameters)` sent by `caller`."""

    model_config = ConfigDict(frozen=True)

    function_name: str
    caller: str
    parameters: List[Any] = Field(default_factory=list)

    gas_limit: Optional[int] = None
    gas_price: Optional[int] = Field(None, description="wei")
    value: int = Field(0, description="wei")

    block: Union[str, int] = "latest"
    network: str = DEFAULT_NETWORK
    # Defaults to the network's default contract
    contract_address: Optional[str] = None


class BatchOperation(BaseModel):
    model_config = ConfigDict(frozen=True)

    function_name: str
    parameters: List[Any] = Field(default_factory=list)
