import pytest
from eth_abi import encode

from constants.error_selectors import KNOWN_ERROR_CODES
from simulation.enums.error_severity import ErrorCategory, Severity
from simulation.service.error_decoder_service import ErrorDecoderService


def revert_payload(reason: str) -> str:
    return "0x08c379a0" + encode(["string"], [reason]).hex()


def test_decodes_revert_string():
    decoded = ErrorDecoderService.decode(
        "execution reverted", revert_payload("ERC20: transfer amount exceeds balance")
    )

    assert decoded.code == "0x08c379a0"
    assert decoded.decoded_message == "ERC20: transfer amount exceeds balance"
    assert decoded.severity == Severity.HIGH
    assert decoded.category == ErrorCategory.BALANCE
    assert decoded.suggestion == "Ensure the sender has sufficient token balance for this transfer"
    assert ErrorDecoderService.format_for_display(decoded) == "ERC20: transfer amount exceeds balance"


def test_revert_string_embedded_in_message():
    message = f"execution reverted: {revert_payload('Pausable: paused')}"
    decoded = ErrorDecoderService.decode(message)

    assert decoded.decoded_message == "Pausable: paused"
    assert decoded.severity == Severity.HIGH
    assert decoded.category == ErrorCategory.CONTRACT_STATE


def test_revert_string_without_trailing_padding():
    body = "20".rjust(64, "0") + "05".rjust(64, "0") + b"hello".hex()
    assert ErrorDecoderService.decode_revert_string("0x08c379a0" + body) == "hello"


@pytest.mark.parametrize("code", sorted(set(KNOWN_ERROR_CODES) - {"0x08c379a0"}))
def test_known_error_codes_are_returned_verbatim(code):
    decoded = ErrorDecoderService.decode("execution reverted", code)
    assert decoded.code == code
    assert decoded.decoded_message == KNOWN_ERROR_CODES[code]


def test_known_code_classification():
    allowance = ErrorDecoderService.decode("execution reverted", "0xdab70cb7")
    assert allowance.decoded_message == "ERC20: insufficient allowance"
    assert allowance.severity == Severity.HIGH
    assert allowance.category == ErrorCategory.ALLOWANCE
    assert allowance.suggestion == "Increase the allowance before attempting this transfer"

    zero_address = ErrorDecoderService.decode("execution reverted", "0xbbc67f8f")
    assert zero_address.severity == Severity.MEDIUM
    assert zero_address.category == ErrorCategory.ADDRESS

    role = ErrorDecoderService.decode("execution reverted", "0x3b8da488")
    assert role.category == ErrorCategory.PERMISSION
    assert role.suggestion == "This operation requires special permissions that the sender does not have"


def test_unknown_error_keeps_raw_message():
    decoded = ErrorDecoderService.decode("out of gas")

    assert decoded.code is None
    assert decoded.decoded_message is None
    assert decoded.severity == Severity.MEDIUM
    assert decoded.suggestion is None
    assert decoded.category == ErrorCategory.OTHER
    assert ErrorDecoderService.format_for_display(decoded) == "out of gas"


def test_unknown_selector_keeps_code():
    decoded = ErrorDecoderService.decode("execution reverted", "0xdeadbeef")
    assert decoded.code == "0xdeadbeef"
    assert decoded.decoded_message is None
    assert decoded.message == "execution reverted"


@pytest.mark.parametrize(
    "text, expected",
    [
        ("ERC20: transfer amount exceeds balance", True),
        ("Insufficient Balance for transfer", True),
        ("ERC20: insufficient allowance", True),
        ("execution reverted: 0x356680b7", True),
        ("reverted with 0xDAB70CB7", True),
        ("Pausable: paused", False),
        ("ERC20: transfer to the zero address", False),
        ("", False),
    ],
)
def test_hypothetical_success_predicate(text, expected):
    assert ErrorDecoderService.is_hypothetical_success(text) is expected


@pytest.mark.parametrize(
    "text, severity",
    [
        ("Blacklistable: account is blacklisted", Severity.HIGH),
        ("ERC20Permit: expired deadline", Severity.MEDIUM),
        ("something unexpected", Severity.LOW),
    ],
)
def test_severity_keywords(text, severity):
    assert ErrorDecoderService.severity_for(text) == severity
