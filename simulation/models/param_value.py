from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class AddressParam(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["address"] = "address"
    value: str                          # checksummed


class UIntParam(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["uint"] = "uint"
    value: int = Field(ge=0)            # already scaled to the integer domain
    bits: int = 256


class BoolParam(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["bool"] = "bool"
    value: bool


class FixedBytesParam(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["bytes32"] = "bytes32"
    value: bytes = Field(max_length=32)


ParamValue = Annotated[
    Union[AddressParam, UIntParam, BoolParam, FixedBytesParam],
    Field(discriminator="kind"),
]
