import re
from decimal import ROUND_FLOOR, Decimal, DecimalException, localcontext
from typing import Any, List, Optional, Sequence

from eth_abi import decode, encode
from eth_utils import is_address, to_checksum_address
from hexbytes import HexBytes

from constants.function_signatures import TOKEN_AMOUNT_RETURNS
from simulation.models.contract import FunctionSignature
from simulation.models.param_value import AddressParam, BoolParam, FixedBytesParam, ParamValue, UIntParam
from utils.exceptions import (
    ArgumentCountMismatch,
    EncodingError,
    InvalidAddress,
    InvalidNumeric,
    UnsupportedType,
)
from utils.formatter_utils import strip_0x
from utils.logger_utils import get_logger

logger = get_logger("ABI Codec")

WORD_SIZE = 32
SELECTOR_HEX_LENGTH = 8
# Enough digits for uint256 (78) times any sane decimals value
DECIMAL_PRECISION = 120
# Digits of 2**256 - 1, anything with a larger exponent cannot be a token amount
MAX_AMOUNT_DIGITS = 78

_UINT_PATTERN = re.compile(r"^uint(\d*)$")


def uint_bits(abi_type: str) -> Optional[int]:
    """Bit width of a `uintN` type, None for anything else."""
    match = _UINT_PATTERN.match(abi_type)
    if not match:
        return None
    bits = int(match.group(1) or 256)
    if bits % 8 != 0 or not 8 <= bits <= 256:
        return None
    return bits


def is_supported_type(abi_type: str) -> bool:
    return abi_type in ("address", "bool", "bytes32") or uint_bits(abi_type) is not None


def scale_amount(value: Any, decimals: int) -> int:
    """Converts a human token amount ("1.5") into base units (1500000 for 6 decimals), rounding down."""
    try:
        with localcontext() as ctx:
            ctx.prec = DECIMAL_PRECISION
            amount = Decimal(str(value).strip())
            if not amount.is_finite():
                raise InvalidNumeric(value, "amount must be finite")
            if amount.adjusted() >= MAX_AMOUNT_DIGITS:
                raise InvalidNumeric(value, "amount out of range")
            return int((amount * (Decimal(10) ** decimals)).to_integral_value(rounding=ROUND_FLOOR))
    except DecimalException:
        raise InvalidNumeric(value, "not a number")


def unscale_amount(value: int, decimals: int) -> Decimal:
    with localcontext() as ctx:
        ctx.prec = DECIMAL_PRECISION
        return Decimal(value) / (Decimal(10) ** decimals)


def _to_int(value: Any) -> int:
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not value.is_integer():
            raise InvalidNumeric(value, "not an integer")
        return int(value)
    if isinstance(value, Decimal):
        if not value.is_finite() or value != value.to_integral_value():
            raise InvalidNumeric(value, "not an integer")
        return int(value)
    if isinstance(value, str):
        text = value.strip()
        try:
            if text.lower().startswith("0x"):
                return int(text, 16)
            return int(text)
        except ValueError:
            raise InvalidNumeric(value, "not an integer")
    raise InvalidNumeric(value, f"unexpected type {type(value).__name__}")


class AbiCodec(object):
    """Encodes typed arguments into call data and decodes raw return data."""

    @staticmethod
    def to_param_values(signature: FunctionSignature, args: Sequence[Any], decimals: int) -> List[ParamValue]:
        if len(args) != len(signature.param_types):
            raise ArgumentCountMismatch(signature.name, len(signature.param_types), len(args))

        return [
            AbiCodec.to_param_value(abi_type, arg, decimals, signature.is_amount_param(index))
            for index, (abi_type, arg) in enumerate(zip(signature.param_types, args))
        ]

    @staticmethod
    def to_param_value(abi_type: str, value: Any, decimals: int = 0, is_amount: bool = False) -> ParamValue:
        if abi_type == "address":
            if not isinstance(value, str) or not is_address(value):
                raise InvalidAddress(value)
            return AddressParam(value=to_checksum_address(value))

        bits = uint_bits(abi_type)
        if bits is not None:
            # bool is an int subclass, reject it explicitly
            if isinstance(value, bool) or value is None:
                raise InvalidNumeric(value)
            number = scale_amount(value, decimals) if is_amount else _to_int(value)
            if number < 0:
                raise InvalidNumeric(value, "must not be negative")
            if number >= 2**bits:
                raise InvalidNumeric(value, f"does not fit in uint{bits}")
            return UIntParam(value=number, bits=bits)

        if abi_type == "bool":
            if isinstance(value, bool):
                return BoolParam(value=value)
            if isinstance(value, str) and value.strip().lower() in ("true", "false"):
                return BoolParam(value=value.strip().lower() == "true")
            raise EncodingError(f"Invalid boolean value: {value!r}", {"value": str(value)})

        if abi_type == "bytes32":
            try:
                raw = bytes(HexBytes(value))
            except (ValueError, TypeError):
                raise EncodingError(f"Invalid bytes32 value: {value!r}", {"value": str(value)})
            if len(raw) > WORD_SIZE:
                raise EncodingError(f"bytes32 value is {len(raw)} bytes long", {"value": str(value)})
            return FixedBytesParam(value=raw)

        raise UnsupportedType(abi_type)

    @staticmethod
    def encode_param(param: ParamValue) -> bytes:
        if isinstance(param, AddressParam):
            return encode(["address"], [param.value])
        elif isinstance(param, UIntParam):
            return encode([f"uint{param.bits}"], [param.value])
        elif isinstance(param, BoolParam):
            return encode(["bool"], [param.value])
        elif isinstance(param, FixedBytesParam):
            return param.value.rjust(WORD_SIZE, b"\x00")
        raise UnsupportedType(type(param).__name__)

    @staticmethod
    def encode(signature: FunctionSignature, args: Sequence[Any], decimals: int) -> str:
        """
        Builds call data: selector followed by one 32-byte word per parameter.

        Raises:
            EncodingError: argument count, type or value does not fit the signature.
        """
        for abi_type in signature.param_types:
            if not is_supported_type(abi_type):
                raise UnsupportedType(abi_type)

        params = AbiCodec.to_param_values(signature, args, decimals)
        words = b"".join(AbiCodec.encode_param(param) for param in params)
        return signature.selector + words.hex()

    @staticmethod
    def decode_call_data(signature: FunctionSignature, call_data: str, decimals: int) -> List[Any]:
        """Inverse of `encode`: amount parameters come back as Decimal token units."""
        body = strip_0x(call_data)
        if body[:SELECTOR_HEX_LENGTH].lower() != strip_0x(signature.selector).lower():
            raise EncodingError(
                f"Call data does not start with the {signature.name} selector {signature.selector}",
                {"call_data": call_data},
            )

        try:
            data = bytes.fromhex(body[SELECTOR_HEX_LENGTH:])
        except ValueError:
            raise EncodingError(f"Call data is not valid hex: {call_data}", {"call_data": call_data})
        expected_length = WORD_SIZE * len(signature.param_types)
        if len(data) != expected_length:
            raise EncodingError(
                f"Expected {expected_length} bytes of arguments for {signature.name}, got {len(data)}",
                {"call_data": call_data},
            )

        values = []
        for index, abi_type in enumerate(signature.param_types):
            word = data[index * WORD_SIZE : (index + 1) * WORD_SIZE]
            if abi_type == "bytes32":
                values.append("0x" + word.hex())
                continue
            if not is_supported_type(abi_type):
                raise UnsupportedType(abi_type)

            value = decode([abi_type], word)[0]
            if abi_type == "address":
                value = to_checksum_address(value)
            elif signature.is_amount_param(index):
                value = unscale_amount(value, decimals)
            values.append(value)
        return values

    @staticmethod
    def decode_output(signature: FunctionSignature, raw_hex: Optional[str], decimals: int) -> Any:
        """
        Converts raw return data into a native value.
        Returns None for empty output and the raw hex string whenever decoding fails.
        """
        if raw_hex is None or strip_0x(raw_hex) == "":
            return None
        if not signature.return_type:
            return raw_hex

        return_type = signature.return_type
        try:
            data = bytes(HexBytes(raw_hex))

            if uint_bits(return_type) is not None:
                value = decode([return_type], data)[0]
                if signature.name in TOKEN_AMOUNT_RETURNS:
                    return unscale_amount(value, decimals)
                return value

            if return_type == "bool":
                return decode(["bool"], data)[0]

            if return_type == "address":
                return to_checksum_address(decode(["address"], data)[0])

            if return_type == "string":
                return AbiCodec._decode_string(data)

            if return_type == "bytes32":
                return "0x" + data[:WORD_SIZE].hex()

            return raw_hex
        except Exception as e:
            logger.debug(f"Failed to decode {signature.name} output as {return_type}: {e}. Raw Data: {raw_hex}")
            return raw_hex

    @staticmethod
    def _decode_string(data: bytes) -> str:
        # Some legacy tokens return bytes32 instead of a dynamic string
        if len(data) == WORD_SIZE:
            return data.rstrip(b"\x00").decode("utf-8")
        return decode(["string"], data)[0].replace("\x00", "")
