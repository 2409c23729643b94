#!/usr/bin/env python3
"""
Container Detector
Identifies JPEG, TIFF, raw-Exif and HEIF inputs and extracts the TIFF block they carry
"""

import logging
import struct

import heif_reader
import tiff_codec
from exif_errors import ExifHeaderError, NoExifError
from exif_models import FileType

logger = logging.getLogger('container_detector')

EXIF_MARKER = b'Exif\x00\x00'
JPEG_APP1 = 0xE1


def detect_file_type(header: bytes) -> FileType:
    """Classify input from its first eight bytes.

    Anything without a TIFF, Exif or ftyp signature is treated as JPEG.
    """
    if header[:4] in (b'II*\x00', b'MM\x00*'):
        return FileType.TIFF
    if header[:4] == b'Exif':
        return FileType.RAW_EXIF
    if header[4:8] == b'ftyp':
        return FileType.HEIF
    return FileType.JPEG


def strip_exif_marker(data: bytes) -> bytes:
    if len(data) < len(EXIF_MARKER):
        raise ExifHeaderError("exif: short read of Exif marker")
    if data[:len(EXIF_MARKER)] != EXIF_MARKER:
        raise ExifHeaderError("exif: missing Exif marker")
    return data[len(EXIF_MARKER):]


def find_jpeg_exif(data: bytes) -> bytes:
    """Return the TIFF block of the first Exif APP1 segment.

    APP1 segments carrying other payloads (XMP) are skipped.
    """
    pos = 0
    while True:
        pos = data.find(b'\xff', pos)
        if pos < 0 or pos + 1 >= len(data):
            raise NoExifError("exif: failed to find exif intro marker")
        if data[pos + 1] != JPEG_APP1:
            pos += 1
            continue

        if pos + 4 > len(data):
            raise ExifHeaderError("exif: short read of APP1 segment length")
        length = struct.unpack_from('>H', data, pos + 2)[0]
        start = pos + 4
        end = pos + 2 + length
        if length < 2 or end > len(data):
            raise ExifHeaderError("exif: short read of APP1 segment content")

        segment = data[start:end]
        if segment.startswith(EXIF_MARKER):
            return segment[len(EXIF_MARKER):]
        logger.debug("Skipping non-Exif APP1 segment at %d", pos)
        pos = end


def find_tiff_header(data: bytes) -> int:
    """Offset of the first valid TIFF header in data"""
    pos = 0
    while True:
        candidates = [p for p in (data.find(b'II', pos), data.find(b'MM', pos)) if p >= 0]
        if not candidates:
            raise ExifHeaderError("exif: no valid TIFF header found")
        pos = min(candidates)
        if tiff_codec.is_tiff_header(data, pos):
            return pos
        pos += 1


def extract_tiff(data: bytes, file_type: FileType) -> bytes:
    """Return the TIFF-structured EXIF bytes held by a container"""
    if file_type is FileType.HEIF:
        block = heif_reader.extract_exif(data)
        if block.startswith(EXIF_MARKER):
            return strip_exif_marker(block)
        return block
    if file_type is FileType.RAW_EXIF:
        return strip_exif_marker(data)
    if file_type is FileType.JPEG:
        return find_jpeg_exif(data)
    return data
