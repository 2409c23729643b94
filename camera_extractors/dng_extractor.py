#!/usr/bin/env python3
"""
DNG Extractor
Loads the preview and full-size JPEG sub-IFDs referenced from IFD0 of DNG and similar raw files
"""

from typing import Dict
import logging

import exif_fields
from exif_accessors import PreviewImageTag
from exif_errors import MakerNoteError, TagValueError
from .base_extractor import CameraExtractor

logger = logging.getLogger('dng_extractor')


def sub_ifd_field(ifd: str, field: str) -> str:
    return f"{ifd}.{field}"


SUB_IFD_WIDTH = 'Width'


def _sub_ifd_fields(ifd: str, start: str, length: str) -> Dict[int, str]:
    return {
        0x00fe: sub_ifd_field(ifd, exif_fields.SUBFILE_TYPE),
        0x0100: sub_ifd_field(ifd, SUB_IFD_WIDTH),
        0x0101: sub_ifd_field(ifd, exif_fields.IMAGE_LENGTH),
        0x0103: sub_ifd_field(ifd, exif_fields.COMPRESSION),
        0x0111: sub_ifd_field(ifd, start),
        0x0117: sub_ifd_field(ifd, length),
        0xc71a: sub_ifd_field(ifd, 'PreviewColorSpace'),
        0xc71b: sub_ifd_field(ifd, 'PreviewDateTime'),
    }


JPG_FROM_RAW_START = 'JpgFromRawStart'
JPG_FROM_RAW_LENGTH = 'JpgFromRawLength'

SUB_IFD_FIELDS = (
    _sub_ifd_fields('SubIfd0', exif_fields.PREVIEW_IMAGE_START, exif_fields.PREVIEW_IMAGE_LENGTH),
    _sub_ifd_fields('SubIfd1', exif_fields.PREVIEW_IMAGE_START, exif_fields.PREVIEW_IMAGE_LENGTH),
    _sub_ifd_fields('SubIfd2', JPG_FROM_RAW_START, JPG_FROM_RAW_LENGTH),
)


def _preview_tag(ifd: str, start: str, length: str) -> PreviewImageTag:
    return PreviewImageTag(
        sub_ifd_field(ifd, start),
        sub_ifd_field(ifd, length),
        sub_ifd_field(ifd, exif_fields.COMPRESSION),
    )


SUB_IFD0_PREVIEW_IMAGE = _preview_tag('SubIfd0', exif_fields.PREVIEW_IMAGE_START, exif_fields.PREVIEW_IMAGE_LENGTH)
SUB_IFD1_PREVIEW_IMAGE = _preview_tag('SubIfd1', exif_fields.PREVIEW_IMAGE_START, exif_fields.PREVIEW_IMAGE_LENGTH)
SUB_IFD2_JPG_FROM_RAW = _preview_tag('SubIfd2', JPG_FROM_RAW_START, JPG_FROM_RAW_LENGTH)

DNG_PREVIEW_TAGS = (SUB_IFD0_PREVIEW_IMAGE, SUB_IFD1_PREVIEW_IMAGE, SUB_IFD2_JPG_FROM_RAW)


class DngExtractor(CameraExtractor):
    """Extractor for the SubIFDs of DNG files"""

    name = 'AdobeDNG'

    def can_handle(self, exif) -> bool:
        return exif_fields.SUB_IFDS_POINTER in exif and exif.get(exif_fields.SUB_IFDS_POINTER).count > 0

    def get_makernote_tags(self) -> Dict[int, str]:
        merged = {}
        for fields in SUB_IFD_FIELDS:
            merged.update(fields)
        return merged

    def parse(self, exif) -> None:
        if not self.can_handle(exif):
            return
        pointer = exif.get(exif_fields.SUB_IFDS_POINTER)
        for i, fields in enumerate(SUB_IFD_FIELDS):
            try:
                offset = pointer.int_val(i)
            except TagValueError:
                break
            if offset >= len(exif.raw):
                raise MakerNoteError(self.name, f"seek to sub-IFD {i} at {offset} failed")
            directory = self.decode_directory(exif.raw, offset, exif.tiff.order)
            exif.load_tags(directory, fields, False)
            logger.debug("Merged %d tags from sub-IFD %d", len(directory), i)
