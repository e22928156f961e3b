import re
from typing import Optional

from eth_abi import decode

from constants.error_selectors import (
    ALLOWANCE_ERROR_KEYWORDS,
    BALANCE_ERROR_KEYWORDS,
    ERROR_STRING_SELECTOR,
    ERROR_SUGGESTIONS,
    HIGH_SEVERITY_KEYWORDS,
    KNOWN_ERROR_CODES,
    MEDIUM_SEVERITY_KEYWORDS,
)
from simulation.enums.error_severity import ErrorCategory, Severity
from simulation.models.decoded_error import DecodedError
from utils.formatter_utils import hex_to_dec, split_words, strip_0x
from utils.logger_utils import get_logger

logger = get_logger("Error Decoder Service")

SELECTOR_LENGTH = len("0x") + 8

_HEX_PAYLOAD_PATTERN = re.compile(r"0x[0-9a-fA-F]{8,}")


class ErrorDecoderService(object):
    """Classifies revert payloads and node error messages into a DecodedError."""

    @staticmethod
    def decode(message: str, data: Optional[str] = None) -> DecodedError:
        """
        Decodes a failed call.

        `data` is the raw revert payload when the node returned one; otherwise a hex
        payload embedded in `message` is used. Resolution order: an Error(string)
        revert reason, then the known error code table, then the raw message.
        """
        message = message or ""
        payload = ErrorDecoderService.extract_payload(message, data)
        code = payload[:SELECTOR_LENGTH].lower() if payload else None

        decoded_message = None
        if code == ERROR_STRING_SELECTOR:
            decoded_message = ErrorDecoderService.decode_revert_string(payload)
        if decoded_message is None and code in KNOWN_ERROR_CODES:
            decoded_message = KNOWN_ERROR_CODES[code]

        if decoded_message is None:
            logger.debug(f"Could not decode error payload {payload!r}, surfacing raw message")
            return DecodedError(
                code=code,
                message=message,
                severity=Severity.MEDIUM,
                category=ErrorDecoderService.error_category(f"{message} {payload or ''}"),
            )

        return DecodedError(
            code=code,
            message=message,
            decoded_message=decoded_message,
            severity=ErrorDecoderService.severity_for(decoded_message),
            suggestion=ErrorDecoderService.suggestion_for(decoded_message),
            category=ErrorDecoderService.error_category(f"{decoded_message} {payload}"),
        )

    @staticmethod
    def extract_payload(message: str, data: Optional[str] = None) -> Optional[str]:
        if isinstance(data, str) and data.lower().startswith("0x") and len(data) >= SELECTOR_LENGTH:
            return data
        match = _HEX_PAYLOAD_PATTERN.search(message or "")
        return match.group(0) if match else None

    @staticmethod
    def decode_revert_string(payload: str) -> Optional[str]:
        """Extracts the reason from `0x08c379a0` + offset + length + UTF-8 bytes; None when it cannot."""
        body = strip_0x(payload)[8:]
        try:
            reason = decode(["string"], bytes.fromhex(body))[0]
        except Exception:
            # Some nodes truncate the trailing padding, read offset/length words directly
            reason = ErrorDecoderService._decode_unpadded_string(body)

        if reason is None:
            return None
        reason = reason.replace("\x00", "")
        return reason or None

    @staticmethod
    def _decode_unpadded_string(body: str) -> Optional[str]:
        words = split_words("0x" + body[:128])
        if len(words) < 2:
            return None
        length = hex_to_dec(words[1])
        if length is None:
            return None
        string_hex = body[128 : 128 + length * 2]
        try:
            return bytes.fromhex(string_hex).decode("utf-8", errors="replace")
        except ValueError:
            logger.debug(f"Revert reason is not valid hex: {string_hex}")
            return None

    @staticmethod
    def severity_for(text: str) -> Severity:
        lower = text.lower()
        if any(keyword in lower for keyword in HIGH_SEVERITY_KEYWORDS):
            return Severity.HIGH
        if any(keyword in lower for keyword in MEDIUM_SEVERITY_KEYWORDS):
            return Severity.MEDIUM
        return Severity.LOW

    @staticmethod
    def suggestion_for(text: str) -> Optional[str]:
        lower = text.lower()
        for keywords, suggestion in ERROR_SUGGESTIONS:
            if any(keyword in lower for keyword in keywords):
                return suggestion
        return None

    @staticmethod
    def is_balance_error(text: str) -> bool:
        lower = (text or "").lower()
        return any(keyword in lower for keyword in BALANCE_ERROR_KEYWORDS)

    @staticmethod
    def is_allowance_error(text: str) -> bool:
        lower = (text or "").lower()
        return any(keyword in lower for keyword in ALLOWANCE_ERROR_KEYWORDS)

    @staticmethod
    def is_hypothetical_success(text: str) -> bool:
        """A failure caused only by missing balance or allowance would succeed with enough funds."""
        return ErrorDecoderService.is_balance_error(text) or ErrorDecoderService.is_allowance_error(text)

    @staticmethod
    def error_category(text: str) -> ErrorCategory:
        lower = (text or "").lower()
        if ErrorDecoderService.is_balance_error(lower):
            return ErrorCategory.BALANCE
        if ErrorDecoderService.is_allowance_error(lower):
            return ErrorCategory.ALLOWANCE
        if "zero address" in lower:
            return ErrorCategory.ADDRESS
        if "paused" in lower:
            return ErrorCategory.CONTRACT_STATE
        if "signature" in lower or "permit" in lower:
            return ErrorCategory.AUTHORIZATION
        if "role" in lower or "access" in lower:
            return ErrorCategory.PERMISSION
        return ErrorCategory.OTHER

    @staticmethod
    def format_for_display(error: DecodedError) -> str:
        if error.decoded_message and error.decoded_message != error.message:
            return error.decoded_message
        return error.message
