from eth_utils import encode_hex, function_signature_to_4byte_selector
from web3 import Web3


def function_selector(signature: str) -> str:
    """4-byte selector of a canonical function signature, e.g. `transfer(address,uint256)` -> `0xa9059cbb`."""
    return encode_hex(function_signature_to_4byte_selector(signature))


def event_topic(signature: str) -> str:
    """Keccak-256 topic hash of a canonical event signature."""
    return encode_hex(Web3.keccak(text=signature))
