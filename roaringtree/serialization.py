"""Portable binary form of a treemap.

The layout is a little-endian 64-bit partition count followed, for each
partition, by its 32-bit key and the serialized ``RoaringBitmap``.
"""

from __future__ import annotations

import io
import struct
from collections.abc import Callable
from typing import BinaryIO

from .bitmap import RoaringBitmap
from .treemap import RoaringTreemap

_COUNT = struct.Struct("<Q")
_KEY = struct.Struct("<I")


def _read_exact(reader: BinaryIO, size: int) -> bytes:
    data = reader.read(size)
    if len(data) != size:
        raise ValueError("unexpected end of serialized data")
    return data


def serialized_size(treemap: RoaringTreemap) -> int:
    """Size in bytes of the serialized form."""
    return _COUNT.size + sum(
        _KEY.size + bitmap.serialized_size() for _, bitmap in treemap.bitmaps()
    )


def serialize_into(treemap: RoaringTreemap, writer: BinaryIO) -> None:
    """Write the serialized form to a binary stream."""
    partitions = list(treemap.bitmaps())
    writer.write(_COUNT.pack(len(partitions)))
    for key, bitmap in partitions:
        writer.write(_KEY.pack(key))
        bitmap.serialize_into(writer)


def to_bytes(treemap: RoaringTreemap) -> bytes:
    """The serialized form as bytes."""
    buffer = io.BytesIO()
    serialize_into(treemap, buffer)
    return buffer.getvalue()


def _deserialize(
    reader: BinaryIO, read_bitmap: Callable[[BinaryIO], RoaringBitmap]
) -> RoaringTreemap:
    (size,) = _COUNT.unpack(_read_exact(reader, _COUNT.size))
    partitions = []
    for _ in range(size):
        (key,) = _KEY.unpack(_read_exact(reader, _KEY.size))
        partitions.append((key, read_bitmap(reader)))
    return RoaringTreemap.from_bitmaps(partitions)


def deserialize_from(reader: BinaryIO) -> RoaringTreemap:
    """Read a treemap from a binary stream, validating every bitmap."""
    return _deserialize(reader, RoaringBitmap.deserialize_from)


def deserialize_unchecked_from(reader: BinaryIO) -> RoaringTreemap:
    """Read a treemap from a binary stream without validating the bitmaps."""
    return _deserialize(reader, RoaringBitmap.deserialize_unchecked_from)


def from_bytes(data: bytes) -> RoaringTreemap:
    """Read a treemap from its serialized bytes."""
    return deserialize_from(io.BytesIO(data))