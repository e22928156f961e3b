# MIT License
#
# Copyright (c) 2018 Evgeny Medvedev, evge.medvedev@gmail.com
#
# Permission is hereby granted, free of charge, to any person obtaining a copy
# of this software and associated documentation files (the "Software"), to deal
# in the Software without restriction, including without limitation the rights
# to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
# copies of the Software, and to permit persons to whom the Software is
# furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in all
# copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
# OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.
#
# Modified by: Cuong CT, 6/12/2025
# Change Description: using eth_utils library for implement some formatter utilities

from typing import Generator, List, Optional, Union

from eth_utils import to_checksum_address, to_hex, to_int

from utils.logger_utils import get_logger

logger = get_logger("Formatter Utils")


def hex_to_dec(hex_string: Union[str, int, None]) -> Optional[int]:
    """
    Converts a hex string (or an already decoded int) to a decimal integer.
    """
    if hex_string is None:
        return None
    if isinstance(hex_string, int):
        return hex_string
    try:
        return to_int(hexstr=hex_string)
    except (ValueError, TypeError):
        logger.warning(f"Invalid hex string for conversion: {hex_string}")
        return None


def to_hex_quantity(value: Optional[int]) -> Optional[str]:
    """Encodes an integer as a JSON-RPC quantity (0x-prefixed, no leading zeros)."""
    if value is None:
        return None
    return to_hex(value)


def strip_0x(hex_string: str) -> str:
    return hex_string[2:] if hex_string.lower().startswith("0x") else hex_string


def chunk_string(string: str, length: int) -> Generator[str, None, None]:
    """
    Splits string into chunks of specified length.
    """
    if not string:
        return
    for i in range(0, len(string), length):
        yield string[i : i + length]


def split_words(data: Optional[str]) -> List[str]:
    """Splits 0x-prefixed ABI data into 32-byte words, each 0x-prefixed."""
    if data and len(data) > 2:
        return [f"0x{word}" for word in chunk_string(strip_0x(data), 64)]
    return []


def to_normalized_address(address: Optional[str]) -> Optional[str]:
    """
    Converts an address to its EIP-55 checksum form.
    Returns None for None or non-string input, and the lowercased input when it is not a valid address.
    """
    if address is None or not isinstance(address, str):
        return None

    try:
        return to_checksum_address(address)
    except ValueError:
        return address.lower()


def address_from_topic(topic: Optional[str]) -> Optional[str]:
    """Extracts the address stored in the low 20 bytes of an indexed log topic."""
    if topic is None:
        return None
    if len(topic) >= 40:
        return to_normalized_address("0x" + topic[-40:])
    return to_normalized_address(topic)
