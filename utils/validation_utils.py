from typing import Union

BLOCK_TAGS = ("latest", "pending", "earliest")


def validate_block_number(block_number: int) -> None:
    """
    Validate a single block number.

    Args:
        block_number: The block number to validate, must be >= 0

    Raises:
        ValueError: If the block number is invalid
    """
    if block_number < 0:
        raise ValueError(f"Block number must be greater than or equal to 0, got {block_number}")


def validate_block_reference(block: Union[str, int]) -> None:
    """
    Validate a block reference: one of the named tags, a non-negative
    integer, or a 0x-prefixed hex block number.

    Raises:
        ValueError: If the block reference is invalid
    """
    if isinstance(block, bool):
        raise ValueError(f"Invalid block reference: {block}")

    if isinstance(block, int):
        validate_block_number(block)
        return

    if not isinstance(block, str) or not block:
        raise ValueError(f"Invalid block reference: {block!r}")

    if block.lower() in BLOCK_TAGS:
        return

    if block.lower().startswith("0x"):
        try:
            validate_block_number(int(block, 16))
        except ValueError:
            raise ValueError(f"Invalid hex block number: {block}")
        return

    if block.isdigit():
        return

    raise ValueError(f"Invalid block reference: {block}")


def to_rpc_block(block: Union[str, int]) -> str:
    """Normalizes a validated block reference to the JSON-RPC form."""
    if isinstance(block, int):
        return hex(block)
    if block.isdigit():
        return hex(int(block))
    return block.lower()
