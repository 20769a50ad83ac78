"""Chunked base64 decoding for large audio payloads."""

from __future__ import annotations

import base64
import binascii

from app.core.errors import BadRequestError

# base64 encodes 3 bytes as 4 characters; only whole quanta decode independently
_QUANTUM = 4


def decode_base64_chunks(data: str, chunk_size: int = 32768) -> bytes:
    """
    Decode a base64 string in bounded chunks and concatenate the result.

    Each slice is realigned to a multiple of 4 characters (leftover characters
    carry into the next slice), so any chunk size yields the same bytes as a
    single ``b64decode`` call. Whitespace is ignored.

    Args:
        data: Base64 text (standard alphabet, padding optional on the last quantum)
        chunk_size: Characters read per step

    Returns:
        Decoded bytes

    Raises:
        BadRequestError: If the payload is not valid base64
        ValueError: If chunk_size is not positive
    """
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")

    parts: list[bytes] = []
    carry = ""
    position = 0

    try:
        while position < len(data):
            # Whitespace is dropped per slice, never across the whole payload
            piece = carry + "".join(data[position : position + chunk_size].split())
            position += chunk_size

            usable = len(piece) - (len(piece) % _QUANTUM)
            if usable:
                parts.append(base64.b64decode(piece[:usable], validate=True))
            carry = piece[usable:]

        if carry:
            # Tolerate a missing "=" padding on the final quantum
            padded = carry + "=" * (-len(carry) % _QUANTUM)
            parts.append(base64.b64decode(padded, validate=True))
    except (binascii.Error, ValueError) as e:
        raise BadRequestError(
            "audioData is not valid base64", context={"offset": position}
        ) from e

    return b"".join(parts)
