import pytest

from utils.exceptions import CallRevertedError, RetriableValueError, RpcGatewayError
from utils.rpc_utils import extract_revert_data, is_retriable_error, is_revert_error, rpc_response_to_result


def test_result_is_returned():
    assert rpc_response_to_result({"jsonrpc": "2.0", "id": 1, "result": "0x01"}) == "0x01"


def test_missing_result_is_retriable():
    with pytest.raises(RetriableValueError, match="Make sure Ethereum node is synced"):
        rpc_response_to_result({"jsonrpc": "2.0", "id": 1})


def test_revert_error():
    response = {"error": {"code": 3, "message": "execution reverted: ERC20: insufficient allowance", "data": "0xdab70cb7"}}

    with pytest.raises(CallRevertedError) as exc_info:
        rpc_response_to_result(response)

    assert exc_info.value.data == "0xdab70cb7"
    assert exc_info.value.code == 3
    assert exc_info.value.message == "execution reverted: ERC20: insufficient allowance"


def test_server_error_is_retriable():
    with pytest.raises(RetriableValueError):
        rpc_response_to_result({"error": {"code": -32603, "message": "internal error"}})


def test_other_errors():
    with pytest.raises(RpcGatewayError, match="method not found") as exc_info:
        rpc_response_to_result({"error": {"code": -32601, "message": "method not found"}})
    assert not isinstance(exc_info.value, CallRevertedError)


@pytest.mark.parametrize(
    "code, expected",
    [(-32603, True), (-32000, True), (-32099, True), (-32100, False), (-32601, False), (None, False), ("-32000", False)],
)
def test_is_retriable_error(code, expected):
    assert is_retriable_error(code) is expected


def test_is_revert_error():
    assert is_revert_error({"code": 3, "message": ""})
    assert is_revert_error({"code": -32000, "message": "VM execution error."})
    assert not is_revert_error({"code": -32000, "message": "header not found"})


@pytest.mark.parametrize(
    "error, expected",
    [
        ({"data": "0x08c379a0"}, "0x08c379a0"),
        ({"data": {"data": "0xdab70cb7"}}, "0xdab70cb7"),
        ({"data": {"result": "0x356680b7"}}, "0x356680b7"),
        ({"message": "Reverted 0x356680b7"}, "0x356680b7"),
        ({"message": "execution reverted"}, None),
    ],
)
def test_extract_revert_data(error, expected):
    assert extract_revert_data(error) == expected
