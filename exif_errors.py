#!/usr/bin/env python3
"""
EXIF Errors
Exception hierarchy shared by the TIFF codec, the decode pipeline and the maker-note parsers
"""

from enum import Enum
from typing import Dict, Optional


class LoadStage(Enum):
    """Sub-directory traversal stages of the default parser"""
    EXIF = 'Exif'
    GPS = 'GPS'
    INTEROPERABILITY = 'Interoperability'


class ExifError(Exception):
    """Base exception for all EXIF decoding errors.

    The optional ``exif`` attribute carries whatever result was populated
    before the failure, so callers can fall back to best-effort data.
    """

    def __init__(self, message: str = "", exif=None):
        self.message = message
        self.exif = exif
        super().__init__(message)


class DecodeError(ExifError):
    """Fatal decode failure: the container or top-level structure is unusable"""


class ExifHeaderError(DecodeError):
    """EXIF marker or TIFF header missing or malformed"""


class NoExifError(DecodeError):
    """The container holds no EXIF block"""


class HeifError(DecodeError):
    """HEIF box structure could not be walked to an EXIF item"""


class TiffDecodeError(ExifError):
    """Malformed TIFF structure: directory, entry or value out of bounds"""


class ShortReadTagValueError(TiffDecodeError):
    """Out-of-line tag value extends past the end of the buffer"""

    def __init__(self, message: str = "tiff: short read of tag value", exif=None):
        super().__init__(message, exif)


class SubIfdErrors(ExifError):
    """Aggregated, non-fatal failures of the Exif, GPS and Interoperability sub-directories"""

    def __init__(self, stages: Dict[LoadStage, str], exif=None):
        self.stages = dict(stages)
        parts = [f"{stage.value}: {msg}" for stage, msg in self.stages.items()]
        super().__init__("exif: sub-IFD errors (" + "; ".join(parts) + ")", exif)

    def __contains__(self, stage: LoadStage) -> bool:
        return stage in self.stages


class ParserError(ExifError):
    """A registered parser failed and decoding was stopped"""


class MakerNoteError(ExifError):
    """Vendor maker-note payload is malformed after its signature matched"""

    def __init__(self, vendor: str, message: str, exif=None):
        self.vendor = vendor
        super().__init__(f"{vendor}: {message}", exif)


class TagNotPresentError(ExifError):
    """The requested field was not found in the decoded data"""

    def __init__(self, field: str):
        self.field = field
        super().__init__(f"exif: tag {field!r} is not present")


class TagValueError(ExifError, ValueError):
    """A field is present but its value has the wrong type or cannot be interpreted"""


class CoordinateFormatError(TagValueError):
    """A GPS coordinate string could not be parsed"""


def is_critical_error(err: Optional[BaseException]) -> bool:
    """Return True when err means the decode produced no usable data.

    Partial sub-directory failures are the only non-critical decode errors.
    """
    if err is None:
        return False
    return not isinstance(err, SubIfdErrors)


def _has_stage(err: Optional[BaseException], stage: LoadStage) -> bool:
    return isinstance(err, SubIfdErrors) and stage in err.stages


def is_exif_error(err: Optional[BaseException]) -> bool:
    return _has_stage(err, LoadStage.EXIF)


def is_gps_error(err: Optional[BaseException]) -> bool:
    return _has_stage(err, LoadStage.GPS)


def is_interoperability_error(err: Optional[BaseException]) -> bool:
    return _has_stage(err, LoadStage.INTEROPERABILITY)


def is_tag_not_present_error(err: Optional[BaseException]) -> bool:
    return isinstance(err, TagNotPresentError)


def is_short_read_tag_value_error(err: Optional[BaseException]) -> bool:
    """Check err and its cause chain for a short tag-value read"""
    while err is not None:
        if isinstance(err, ShortReadTagValueError):
            return True
        err = err.__cause__
    return False
