#!/usr/bin/env python3
"""
EXIF extractor module for the EXIF tool
This module decodes the EXIF block of JPEG, TIFF, raw Exif and HEIF data
and runs the registered camera extractors over the result
"""

import logging
from typing import Callable, Dict, Iterator, Optional, Tuple

import container_detector
import exif_fields
import tiff_codec
from camera_extractors.base_extractor import CameraExtractor
from exif_accessors import ExifAccessorsMixin
from exif_errors import (DecodeError, ExifError, LoadStage, ParserError, SubIfdErrors,
                         TagNotPresentError, TagValueError, TiffDecodeError)

logger = logging.getLogger('exif_extractor')

DEFAULT_MAX_EXIF_SIZE = 4 * 1024 * 1024


class DecodeOptions:
    """Settings for a single decode call

    Args:
        keep_unknown_tags (bool): Keep tags missing from the field tables as UnknownTag_<hex id>
        max_exif_size (int): Maximum number of input bytes read; values <= 0 select the default
    """

    def __init__(self, keep_unknown_tags=False, max_exif_size=DEFAULT_MAX_EXIF_SIZE):
        self.keep_unknown_tags = keep_unknown_tags
        self.max_exif_size = max_exif_size if max_exif_size and max_exif_size > 0 else DEFAULT_MAX_EXIF_SIZE

    def __repr__(self) -> str:
        return (f"DecodeOptions(keep_unknown_tags={self.keep_unknown_tags}, "
                f"max_exif_size={self.max_exif_size})")


class Exif(ExifAccessorsMixin):
    """Decoded EXIF data: named fields plus the TIFF structure they came from.

    ``raw`` is the TIFF block every offset refers to and is never modified.
    """

    def __init__(self, tiff: tiff_codec.Tiff, raw: bytes, options: Optional[DecodeOptions] = None):
        self.tiff = tiff
        self.raw = bytes(raw)
        self.options = options or DecodeOptions()
        self.fields: Dict[str, tiff_codec.Tag] = {}

    def load_tags(self, directory: tiff_codec.Directory, field_map: Dict[int, str], show_missing: bool) -> None:
        """Store the tags of a directory under the names given by field_map

        Args:
            directory: Decoded directory
            field_map: Tag id to field name mapping
            show_missing: Store ids absent from field_map as UnknownTag_<hex id> instead of dropping them
        """
        for tag in directory:
            name = field_map.get(tag.id)
            if name is None:
                if not show_missing:
                    continue
                name = exif_fields.unknown_field_name(tag.id)
            self.fields[name] = tag

    def get(self, name: str) -> tiff_codec.Tag:
        try:
            return self.fields[name]
        except KeyError:
            raise TagNotPresentError(name) from None

    def update(self, name: str, tag: tiff_codec.Tag) -> None:
        """Replace the tag of an existing field"""
        if name not in self.fields:
            raise TagNotPresentError(name)
        self.fields[name] = tag

    def walk(self, fn: Callable[[str, tiff_codec.Tag], None]) -> None:
        """Call fn with the name and tag of every field; an exception from fn stops the walk"""
        for name, tag in list(self.fields.items()):
            fn(name, tag)

    def items(self):
        return self.fields.items()

    def __iter__(self) -> Iterator[str]:
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self.fields)

    def __contains__(self, name) -> bool:
        return name in self.fields

    def __str__(self) -> str:
        return ''.join(f"{name}: {tag}\n" for name, tag in self.fields.items())

    def __repr__(self) -> str:
        return f"Exif({len(self.fields)} fields, order={self.tiff.order!r})"


class ExifExtractor(CameraExtractor):
    """Default parser mapping IFD0, IFD1 and the Exif, GPS and Interoperability sub-IFDs to field names"""

    name = 'Exif'

    SUB_DIRECTORIES: Tuple[Tuple[LoadStage, str, Dict[int, str]], ...] = (
        (LoadStage.EXIF, exif_fields.EXIF_IFD_POINTER, exif_fields.EXIF_FIELDS),
        (LoadStage.GPS, exif_fields.GPS_INFO_IFD_POINTER, exif_fields.GPS_FIELDS),
        (LoadStage.INTEROPERABILITY, exif_fields.INTEROPERABILITY_IFD_POINTER, exif_fields.INTEROP_FIELDS),
    )

    def get_makernote_tags(self) -> Dict[int, str]:
        return exif_fields.EXIF_FIELDS

    def parse(self, exif) -> None:
        if not exif.tiff.dirs:
            raise DecodeError("invalid exif data")
        keep_unknown = exif.options.keep_unknown_tags
        exif.load_tags(exif.tiff.dirs[0], self.get_makernote_tags(), keep_unknown)

        # thumbnails
        if len(exif.tiff.dirs) >= 2:
            exif.load_tags(exif.tiff.dirs[1], exif_fields.THUMBNAIL_FIELDS, keep_unknown)

        errors = {}
        for stage, pointer, field_map in self.SUB_DIRECTORIES:
            message = self._load_sub_dir(exif, pointer, field_map)
            if message:
                logger.warning("Failed to load %s sub-IFD: %s", stage.value, message)
                errors[stage] = message
        if errors:
            raise SubIfdErrors(errors)

    def _load_sub_dir(self, exif, pointer: str, field_map: Dict[int, str]) -> Optional[str]:
        """Load the directory a pointer field refers to; returns an error message on failure"""
        try:
            offset = exif.get(pointer).int_val(0)
        except (TagNotPresentError, TagValueError):
            return None

        if offset >= len(exif.raw):
            return f"exif: seek to sub-IFD {pointer} failed: offset {offset} is past the end of data"
        try:
            directory, _ = tiff_codec.decode_dir(exif.raw, offset, exif.tiff.order)
        except TiffDecodeError as e:
            return f"exif: sub-IFD {pointer} decode failed: {e.message}"
        exif.load_tags(directory, field_map, exif.options.keep_unknown_tags)
        return None


def _read_input(stream, limit: int) -> bytes:
    if isinstance(stream, (bytes, bytearray, memoryview)):
        return bytes(stream[:limit])
    data = stream.read(limit)
    if data is None:
        raise DecodeError("exif: input stream returned no data")
    return bytes(data)


def _decode_tiff(raw: bytes) -> tiff_codec.Tiff:
    try:
        return tiff_codec.decode(raw)
    except TiffDecodeError as e:
        raise DecodeError(f"exif: decode failed ({e.message})") from e


def _run_extractors(exif: Exif, registry) -> Exif:
    """Run every registered extractor in order.

    Sub-IFD failures are collected and raised after the last extractor;
    any other failure stops the chain.
    """
    partial = None
    for i, extractor in enumerate(registry.snapshot()):
        try:
            extractor.parse(exif)
        except SubIfdErrors as e:
            partial = e
        except DecodeError as e:
            e.exif = exif
            raise
        except ExifError as e:
            raise ParserError(f"exif: parser {i} failed ({e.message})", exif) from e

    if partial is not None:
        partial.exif = exif
        raise partial
    return exif


def _registry(registry):
    if registry is None:
        from camera_extractors.extractor_factory import get_default_registry
        return get_default_registry()
    return registry


def decode(stream, options: Optional[DecodeOptions] = None, registry=None) -> Exif:
    """Decode the EXIF data of a JPEG, TIFF, raw Exif or HEIF input

    Args:
        stream: Binary file object or bytes
        options: DecodeOptions, defaults apply when None
        registry: ParserRegistry to run; the frozen default registry when None

    Returns:
        The decoded Exif object

    Raises:
        DecodeError: The input holds no usable EXIF data
        SubIfdErrors: Some sub-IFDs failed; ``exif`` on the error holds the rest
        ParserError: An extractor failed; ``exif`` on the error holds the fields loaded so far
    """
    options = options or DecodeOptions()
    data = _read_input(stream, options.max_exif_size)
    if len(data) < 8:
        raise DecodeError(f"exif: error reading 8 byte header, got {len(data)}")

    file_type = container_detector.detect_file_type(data[:8])
    logger.debug("Detected %s input", file_type.value)
    raw = container_detector.extract_tiff(data, file_type)
    tiff = _decode_tiff(raw)
    return _run_extractors(Exif(tiff, raw, options), _registry(registry))


def decode_with_parse_header(stream, options: Optional[DecodeOptions] = None, registry=None) -> Exif:
    """Decode the first valid TIFF header found anywhere in the input, ignoring the container"""
    options = options or DecodeOptions()
    data = _read_input(stream, options.max_exif_size)
    start = container_detector.find_tiff_header(data)
    logger.debug("Found TIFF header at %d", start)
    raw = data[start:]
    tiff = _decode_tiff(raw)
    return _run_extractors(Exif(tiff, raw, options), _registry(registry))
