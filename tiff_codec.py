#!/usr/bin/env python3
"""
TIFF Codec
Decodes TIFF headers, image file directories (IFDs) and typed tag values
"""

import json
import logging
import struct
from enum import Enum, IntEnum
from fractions import Fraction
from typing import Any, Dict, Iterator, List, Optional, Tuple

from exif_errors import ShortReadTagValueError, TagValueError, TiffDecodeError

logger = logging.getLogger('tiff_codec')

LITTLE_ENDIAN = '<'
BIG_ENDIAN = '>'

_BYTE_ORDERS = {
    b'II': LITTLE_ENDIAN,
    b'MM': BIG_ENDIAN,
}

TIFF_MAGIC = 42
ENTRY_SIZE = 12


class DataType(IntEnum):
    """TIFF field types"""
    BYTE = 1
    ASCII = 2
    SHORT = 3
    LONG = 4
    RATIONAL = 5
    SBYTE = 6
    UNDEFINED = 7
    SSHORT = 8
    SLONG = 9
    SRATIONAL = 10
    FLOAT = 11
    DOUBLE = 12
    IFD = 13


class Format(Enum):
    """How the values of a tag are interpreted"""
    INT = 'int'
    RAT = 'rat'
    FLOAT = 'float'
    STRING = 'string'
    UNDEF = 'undef'


# size in bytes, struct code per element, value format
_TYPE_INFO: Dict[DataType, Tuple[int, Optional[str], Format]] = {
    DataType.BYTE: (1, 'B', Format.INT),
    DataType.ASCII: (1, None, Format.STRING),
    DataType.SHORT: (2, 'H', Format.INT),
    DataType.LONG: (4, 'I', Format.INT),
    DataType.RATIONAL: (8, 'II', Format.RAT),
    DataType.SBYTE: (1, 'b', Format.INT),
    DataType.UNDEFINED: (1, None, Format.UNDEF),
    DataType.SSHORT: (2, 'h', Format.INT),
    DataType.SLONG: (4, 'i', Format.INT),
    DataType.SRATIONAL: (8, 'ii', Format.RAT),
    DataType.FLOAT: (4, 'f', Format.FLOAT),
    DataType.DOUBLE: (8, 'd', Format.FLOAT),
    DataType.IFD: (4, 'I', Format.INT),
}


def type_size(data_type: DataType) -> int:
    return _TYPE_INFO[data_type][0]


class Tag:
    """A single directory entry: id, type, count and its raw value bytes.

    ``val_offset`` is the absolute position of an out-of-line value inside
    the buffer the tag was decoded from, or 0 when the value was inline.
    Tags are not modified after creation.
    """

    __slots__ = ('id', 'type', 'count', 'val', 'val_offset', 'order', '_values')

    def __init__(self, tag_id: int, data_type: DataType, count: int, val: bytes,
                 order: str = LITTLE_ENDIAN, val_offset: int = 0):
        try:
            data_type = DataType(data_type)
        except ValueError:
            raise TiffDecodeError(f"tiff: invalid type {data_type} for tag 0x{tag_id:04x}") from None
        val = bytes(val)
        if len(val) != count * type_size(data_type):
            raise TiffDecodeError(
                f"tiff: tag 0x{tag_id:04x} has {len(val)} value bytes, "
                f"expected {count} x {type_size(data_type)}")
        self.id = tag_id
        self.type = data_type
        self.count = count
        self.val = val
        self.val_offset = val_offset
        self.order = order
        self._values = None

    @property
    def format(self) -> Format:
        return _TYPE_INFO[self.type][2]

    @property
    def values(self) -> tuple:
        """All values, converted according to the tag type"""
        if self._values is None:
            self._values = self._convert()
        return self._values

    def _convert(self) -> tuple:
        fmt = self.format
        if fmt is Format.STRING:
            return (self._string(),)
        if fmt is Format.UNDEF:
            return tuple(self.val)
        code = _TYPE_INFO[self.type][1]
        raw = struct.unpack(self.order + code * self.count, self.val)
        if fmt is Format.RAT:
            return tuple(zip(raw[0::2], raw[1::2]))
        return raw

    def _string(self) -> str:
        return self.val.rstrip(b'\x00').decode('utf-8', errors='replace')

    def _check(self, fmt: Format, i: int):
        if self.format is not fmt:
            raise TagValueError(
                f"tiff: tag 0x{self.id:04x} has {self.format.value} values, not {fmt.value}")
        if i < 0 or i >= self.count:
            raise TagValueError(f"tiff: index {i} out of range for tag 0x{self.id:04x} (count {self.count})")

    def int_val(self, i: int = 0) -> int:
        self._check(Format.INT, i)
        return self.values[i]

    def rat2(self, i: int = 0) -> Tuple[int, int]:
        """Numerator and denominator of the i-th rational"""
        self._check(Format.RAT, i)
        return self.values[i]

    def rat(self, i: int = 0) -> Fraction:
        num, den = self.rat2(i)
        if den == 0:
            raise TagValueError(f"tiff: zero denominator in tag 0x{self.id:04x}")
        return Fraction(num, den)

    def rat_float(self, i: int = 0) -> float:
        """The i-th rational as a float; a zero denominator yields the numerator"""
        num, den = self.rat2(i)
        if den == 0:
            return float(num)
        return num / den

    def float_val(self, i: int = 0) -> float:
        self._check(Format.FLOAT, i)
        return self.values[i]

    def string_val(self) -> str:
        if self.format is not Format.STRING:
            raise TagValueError(f"tiff: tag 0x{self.id:04x} is not a string")
        return self.values[0]

    def _json_value(self) -> Any:
        fmt = self.format
        if fmt is Format.STRING:
            return self.values[0]
        if fmt is Format.RAT:
            vals = [f"{num}/{den}" for num, den in self.values]
        else:
            vals = list(self.values)
        if self.count == 1:
            return vals[0]
        return vals

    def __str__(self) -> str:
        return json.dumps(self._json_value())

    def __repr__(self) -> str:
        return f"Tag(id=0x{self.id:04x}, type={self.type.name}, count={self.count}, value={self})"

    def __eq__(self, other) -> bool:
        if not isinstance(other, Tag):
            return NotImplemented
        return (self.id, self.type, self.count, self.val, self.order, self.val_offset) == \
            (other.id, other.type, other.count, other.val, other.order, other.val_offset)

    def __hash__(self) -> int:
        return hash((self.id, self.type, self.count, self.val))


class Directory:
    """An ordered list of tags sharing one byte order"""

    def __init__(self, tags: Optional[List[Tag]] = None, order: str = LITTLE_ENDIAN):
        self.tags = list(tags or [])
        self.order = order

    def __iter__(self) -> Iterator[Tag]:
        return iter(self.tags)

    def __len__(self) -> int:
        return len(self.tags)

    def __repr__(self) -> str:
        return f"Directory({len(self.tags)} tags)"


class Tiff:
    """Byte order plus the chain of top-level directories"""

    def __init__(self, order: str, dirs: List[Directory]):
        self.order = order
        self.dirs = dirs

    def __repr__(self) -> str:
        return f"Tiff(order={self.order!r}, dirs={len(self.dirs)})"


def read_byte_order(data: bytes, offset: int = 0) -> Optional[str]:
    return _BYTE_ORDERS.get(bytes(data[offset:offset + 2]))


def is_tiff_header(data: bytes, offset: int = 0) -> bool:
    """Check for a byte-order marker followed by the magic number 42"""
    order = read_byte_order(data, offset)
    if order is None or len(data) < offset + 8:
        return False
    return struct.unpack_from(order + 'H', data, offset + 2)[0] == TIFF_MAGIC


def decode_tag(data: bytes, offset: int, order: str) -> Tag:
    """Decode the 12-byte directory entry at offset.

    Values wider than four bytes are read from the offset stored in the entry.
    """
    if offset < 0 or offset + ENTRY_SIZE > len(data):
        raise TiffDecodeError(f"tiff: tag entry at {offset} is past the end of data")
    tag_id, raw_type, count = struct.unpack_from(order + 'HHI', data, offset)
    try:
        data_type = DataType(raw_type)
    except ValueError:
        raise TiffDecodeError(f"tiff: invalid type {raw_type} for tag 0x{tag_id:04x}") from None
    if count == 0xFFFFFFFF:
        raise TiffDecodeError(f"tiff: invalid count for tag 0x{tag_id:04x}")

    val_len = count * type_size(data_type)
    if val_len > 4:
        val_offset = struct.unpack_from(order + 'I', data, offset + 8)[0]
        end = val_offset + val_len
        if end > len(data):
            raise ShortReadTagValueError(
                f"tiff: short read of tag 0x{tag_id:04x} value ({val_len} bytes at {val_offset})")
        return Tag(tag_id, data_type, count, data[val_offset:end], order, val_offset)

    val = data[offset + 8:offset + 8 + val_len]
    return Tag(tag_id, data_type, count, val, order)


def decode_dir(data: bytes, offset: int, order: str) -> Tuple[Directory, int]:
    """Decode the directory at offset.

    Returns:
        The directory and the offset of the next directory in the chain (0 for none)
    """
    if offset < 0 or offset + 2 > len(data):
        raise TiffDecodeError(f"tiff: directory offset {offset} is outside of data")
    count = struct.unpack_from(order + 'H', data, offset)[0]
    end = offset + 2 + count * ENTRY_SIZE
    if end + 4 > len(data):
        raise TiffDecodeError(f"tiff: directory at {offset} with {count} entries is truncated")

    tags = [decode_tag(data, offset + 2 + i * ENTRY_SIZE, order) for i in range(count)]
    next_offset = struct.unpack_from(order + 'I', data, end)[0]
    return Directory(tags, order), next_offset


def decode(data: bytes) -> Tiff:
    """Decode a TIFF header and every directory in its top-level chain"""
    data = bytes(data)
    if len(data) < 8:
        raise TiffDecodeError("tiff: header is too short")
    order = read_byte_order(data)
    if order is None:
        raise TiffDecodeError("tiff: could not read byte order")
    magic, offset = struct.unpack_from(order + 'HI', data, 2)
    if magic != TIFF_MAGIC:
        raise TiffDecodeError(f"tiff: bad magic number {magic}")

    dirs = []
    seen = set()
    while offset != 0:
        if offset in seen:
            raise TiffDecodeError("tiff: recursive IFD")
        seen.add(offset)
        if offset >= len(data):
            raise TiffDecodeError("tiff: seek offset after EOF")
        directory, offset = decode_dir(data, offset, order)
        dirs.append(directory)

    logger.debug("Decoded %d directories", len(dirs))
    return Tiff(order, dirs)
