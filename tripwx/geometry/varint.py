"""
Variable-length integer primitives for the flexible polyline format.

Each integer is split into 5-bit groups, least significant first. Every group
is printed as one symbol of a 64-character alphabet; bit 0x20 of the symbol
value flags that more groups follow for the same integer. Signed values are
zig-zag mapped first so that small negative deltas stay short.
"""

from functools import reduce
from typing import List, NamedTuple, Tuple

from tripwx.errors import InvalidSymbol, TruncatedInput

ENCODING_TABLE = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_"

# Indexed by ord(symbol) - 45, covers '-' (45) .. 'z' (122); -1 marks a gap.
DECODING_TABLE = [
    62, -1, -1, 52, 53, 54, 55, 56, 57, 58, 59, 60, 61, -1, -1, -1, -1, -1, -1, -1,
    0, 1, 2, 3, 4, 5, 6, 7, 8, 9, 10, 11, 12, 13, 14, 15, 16, 17, 18, 19, 20, 21,
    22, 23, 24, 25, -1, -1, -1, -1, 63, -1, 26, 27, 28, 29, 30, 31, 32, 33, 34, 35,
    36, 37, 38, 39, 40, 41, 42, 43, 44, 45, 46, 47, 48, 49, 50, 51,
]

DECODING_OFFSET = 45
CONTINUATION_BIT = 0x20
VALUE_MASK = 0x1F
GROUP_BITS = 5


class _DecodeState(NamedTuple):
    """Accumulator threaded through the decode fold."""

    result: int
    shift: int
    values: List[int]


def decode_char(symbol: str, position: int = 0) -> int:
    """Return the 6-bit value of a polyline symbol."""
    index = ord(symbol) - DECODING_OFFSET
    if index < 0 or index >= len(DECODING_TABLE) or DECODING_TABLE[index] < 0:
        raise InvalidSymbol(symbol, position)
    return DECODING_TABLE[index]


def _step(state: _DecodeState, item: Tuple[int, str]) -> _DecodeState:
    position, symbol = item
    value = decode_char(symbol, position)
    result = state.result | ((value & VALUE_MASK) << state.shift)
    if value & CONTINUATION_BIT:
        return _DecodeState(result, state.shift + GROUP_BITS, state.values)
    state.values.append(result)
    return _DecodeState(0, 0, state.values)


def decode_unsigned_stream(text: str) -> List[int]:
    """
    Decode every unsigned integer in an encoded string.

    Args:
        text: Encoded polyline (or any varint stream)

    Returns:
        List of decoded unsigned integers, empty for empty input

    Raises:
        InvalidSymbol: If a character is not part of the alphabet
        TruncatedInput: If the input ends in the middle of an integer
    """
    final = reduce(_step, enumerate(text), _DecodeState(0, 0, []))
    if final.shift > 0:
        raise TruncatedInput(
            f"Polyline ends with an unterminated value after {len(text)} symbols",
            details=len(text),
        )
    return final.values


def to_signed(value: int) -> int:
    """Undo the zig-zag mapping of an unsigned integer."""
    if value & 1:
        value = ~value
    return value >> 1


def to_unsigned(value: int) -> int:
    """Zig-zag map a signed integer onto the unsigned range."""
    if value < 0:
        return ~(value << 1)
    return value << 1


def encode_unsigned(value: int) -> str:
    """Encode a non-negative integer as polyline symbols."""
    if value < 0:
        raise ValueError(f"Cannot encode negative value {value} as unsigned")
    symbols = []
    while value > VALUE_MASK:
        symbols.append(ENCODING_TABLE[(value & VALUE_MASK) | CONTINUATION_BIT])
        value >>= GROUP_BITS
    symbols.append(ENCODING_TABLE[value])
    return "".join(symbols)


def encode_signed(value: int) -> str:
    """Encode a signed integer (zig-zag mapped) as polyline symbols."""
    return encode_unsigned(to_unsigned(value))
