from typing import Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from simulation.enums.contract_type import ContractType, FunctionCategory, StateMutability


class FunctionSignature(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    selector: str                       # 0x + 8 hex chars
    canonical_name: str                 # transfer(address,uint256)
    param_types: Tuple[str, ...] = ()
    param_names: Tuple[str, ...] = ()
    return_type: Optional[str] = None
    state_mutability: StateMutability = StateMutability.NONPAYABLE
    category: FunctionCategory = FunctionCategory.OTHER
    amount_params: Tuple[int, ...] = ()
    description: str = ""

    @property
    def is_read_only(self) -> bool:
        return self.state_mutability in (StateMutability.VIEW, StateMutability.PURE)

    def is_amount_param(self, index: int) -> bool:
        return index in self.amount_params


class EventInput(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    type: str
    indexed: bool = False


class EventSignature(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    topic: str                          # keccak256 of the canonical event signature
    inputs: Tuple[EventInput, ...] = ()


class ContractDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True)

    address: str
    network: str
    symbol: str
    name: str = ""
    decimals: int = Field(18, ge=0, le=77)
    contract_type: ContractType = ContractType.ERC20
    functions: Dict[str, FunctionSignature] = Field(default_factory=dict)
    events: Dict[str, EventSignature] = Field(default_factory=dict)

    def function(self, function_name: str) -> Optional[FunctionSignature]:
        return self.functions.get(function_name)

    def event_by_topic(self, topic: str) -> Optional[EventSignature]:
        topic = topic.lower()
        for event in self.events.values():
            if event.topic.lower() == topic:
                return event
        return None
