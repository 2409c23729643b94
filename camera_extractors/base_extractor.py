#!/usr/bin/env python3
"""
Base Camera Extractor
Defines the interface shared by the default EXIF parser and the maker-note extractors
"""

from abc import ABC, abstractmethod
from typing import Dict, Optional
import logging

import exif_fields
import tiff_codec
from exif_errors import MakerNoteError, TagNotPresentError, TagValueError, TiffDecodeError

logger = logging.getLogger('camera_extractor')


class CameraExtractor(ABC):
    """Base class for parsers run over a decoded Exif result.

    Each extractor reads fields that earlier extractors resolved and merges
    new fields into the same result. Raising an exception from ``parse``
    signals failure to the decoder.
    """

    name = 'base'

    def can_handle(self, exif) -> bool:
        """Check if this extractor applies to the decoded data

        Args:
            exif: Decoded Exif result

        Returns:
            True if the extractor should merge its fields, False otherwise
        """
        return True

    @abstractmethod
    def parse(self, exif) -> None:
        """Decode extractor-specific data found in exif and merge it into exif

        Args:
            exif: Decoded Exif result, updated in place
        """
        pass

    @abstractmethod
    def get_makernote_tags(self) -> Dict[int, str]:
        """Get the tag-id to field-name mapping merged by this extractor

        Returns:
            Dictionary mapping tag ids to field names
        """
        pass

    def maker_note(self, exif) -> Optional[tiff_codec.Tag]:
        """Return the MakerNote tag, or None when the image has none"""
        try:
            return exif.get(exif_fields.MAKER_NOTE)
        except TagNotPresentError:
            logger.debug("%s: no MakerNote", self.name)
            return None

    def decode_directory(self, data: bytes, offset: int, order: str) -> tiff_codec.Directory:
        """Decode one directory of maker-note data, naming this vendor on failure"""
        try:
            directory, _ = tiff_codec.decode_dir(data, offset, order)
        except TiffDecodeError as e:
            raise MakerNoteError(self.name, f"maker note directory decode failed ({e.message})") from e
        return directory

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


def string_field(exif, name: str) -> Optional[str]:
    """Value of a string field, or None when it is absent or not a string"""
    try:
        return exif.get(name).string_val()
    except (TagNotPresentError, TagValueError):
        return None
