from decimal import Decimal
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class _StateChange(BaseModel):
    model_config = ConfigDict(frozen=True)

    contract_address: Optional[str] = None
    amount: Decimal                     # token units, scaled by decimals
    raw_amount: int
    log_index: Optional[int] = None


class TransferChange(_StateChange):
    type: Literal["transfer"] = "transfer"
    from_address: str
    to_address: str


class ApprovalChange(_StateChange):
    type: Literal["approval"] = "approval"
    owner: str
    spender: str


class MintChange(_StateChange):
    type: Literal["mint"] = "mint"
    to_address: str


class BurnChange(_StateChange):
    type: Literal["burn"] = "burn"
    from_address: str


StateChange = Annotated[
    Union[TransferChange, ApprovalChange, MintChange, BurnChange],
    Field(discriminator="type"),
]
