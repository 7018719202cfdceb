""" payload.py

Memory segments come back from the server as "gz:" followed by base64 of the compressed json. The three character tag is skipped without looking at it;
nothing suggests it ever carries a version, so don't start treating it as one.

Servers send gzip, possibly as several concatenated members, but zlib wrapped and raw deflate streams decode as well.
"""
import asyncio
import base64
import binascii
import json
import logging
import zlib
from typing import Any

from .errors import PayloadDecodeError

logger = logging.getLogger(__name__)

TAG_LENGTH = 3

_AUTO_HEADER_WBITS = zlib.MAX_WBITS | 32  # accepts both zlib and gzip headers
_RAW_DEFLATE_WBITS = -zlib.MAX_WBITS


def _inflate_members(data: bytes) -> bytes:
    """ Decompress every member of a concatenated stream, the way gunzip does. Raises zlib.error if any member is cut short.
    """
    chunks = []
    while data:
        inflater = zlib.decompressobj(_AUTO_HEADER_WBITS)
        chunks.append(inflater.decompress(data))
        if not inflater.eof:
            raise zlib.error("incomplete or truncated stream")
        data = inflater.unused_data
    return b"".join(chunks)


def _decompress(data: bytes) -> bytes:
    try:
        return _inflate_members(data)
    except zlib.error:
        pass
    try:
        return zlib.decompress(data, _RAW_DEFLATE_WBITS)
    except zlib.error as e:
        raise PayloadDecodeError(f"Payload is not valid compressed data: {e}") from e


def decode_envelope(envelope: str) -> Any:
    if not isinstance(envelope, str):
        raise PayloadDecodeError(f"Expected a compressed payload string, got {type(envelope).__name__}")
    if len(envelope) < TAG_LENGTH:
        raise PayloadDecodeError("Payload is shorter than its tag")

    try:
        compressed = base64.b64decode(envelope[TAG_LENGTH:], validate=True)
    except (binascii.Error, ValueError) as e:
        raise PayloadDecodeError(f"Payload is not valid base64: {e}") from e

    raw = _decompress(compressed)
    try:
        return json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as e:
        raise PayloadDecodeError(f"Decompressed payload is not valid json: {e}") from e


async def decode_envelope_async(envelope: str) -> Any:
    """ Same as decode_envelope, but the decompression and parsing happen on the default executor. Memory dumps can be large.
    """
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, decode_envelope, envelope)
