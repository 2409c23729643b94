#!/usr/bin/env python3
"""
Canon Maker Note Extractor
Decodes Canon maker notes and interprets camera settings, shot info and AF info
"""

from typing import Dict, List, NamedTuple, Optional
import logging

import exif_fields
from tiff_codec import Format
from exif_errors import TagNotPresentError, TagValueError
from . import canon_tags
from .base_extractor import CameraExtractor

logger = logging.getLogger('canon_extractor')

CANON_CAMERA_SETTINGS = 'Canon.CameraSettings'
CANON_SHOT_INFO = 'Canon.ShotInfo'
CANON_IMAGE_TYPE = 'Canon.ImageType'
CANON_FIRMWARE_VERSION = 'Canon.FirmwareVersion'
CANON_FILE_NUMBER = 'Canon.FileNumber'
CANON_OWNER_NAME = 'Canon.OwnerName'
CANON_SERIAL_NUMBER = 'Canon.SerialNumber'
CANON_MODEL_ID = 'Canon.ModelID'
CANON_AF_INFO = 'Canon.AFInfo'
CANON_TIME_INFO = 'Canon.TimeInfo'
CANON_LENS_MODEL = 'Canon.LensModel'
CANON_INTERNAL_SERIAL_NUMBER = 'Canon.InternalSerialNumber'

CANON_FIELDS = {
    0x0000: 'Canon.0x0000',
    0x0001: CANON_CAMERA_SETTINGS,
    0x0002: exif_fields.FOCAL_LENGTH,
    0x0003: 'Canon.0x0003',
    0x0004: CANON_SHOT_INFO,
    0x0005: 'Canon.Panorama',
    0x0006: CANON_IMAGE_TYPE,
    0x0007: CANON_FIRMWARE_VERSION,
    0x0008: CANON_FILE_NUMBER,
    0x0009: CANON_OWNER_NAME,
    0x000c: CANON_SERIAL_NUMBER,
    0x000d: 'Canon.CameraInfo',
    0x000f: 'Canon.CustomFunctions',
    0x0010: CANON_MODEL_ID,
    0x0012: 'Canon.PictureInfo',
    0x0013: 'Canon.ThumbnailImageValidArea',
    0x0015: 'Canon.SerialNumberFormat',
    0x001a: 'Canon.SuperMacro',
    0x0026: CANON_AF_INFO,
    0x0028: 'Canon.ImageUniqueID',
    0x0035: CANON_TIME_INFO,
    0x0083: 'Canon.OriginalDecisionDataOffset',
    0x0093: 'Canon.FileInfo',
    0x0095: CANON_LENS_MODEL,
    0x0096: CANON_INTERNAL_SERIAL_NUMBER,
    0x0097: 'Canon.DustRemovalData',
    0x0099: 'Canon.CustomFunctions2',
    0x00a0: 'Canon.ProcessingInfo',
    0x00a4: 'Canon.WhiteBalanceTable',
    0x00aa: 'Canon.MeasuredColor',
    0x00b4: exif_fields.COLOR_SPACE,
    0x00b5: 'Canon.0x00b5',
    0x00b6: 'Canon.PreviewImageInfo',
    0x00c0: 'Canon.0x00c0',
    0x00c1: 'Canon.0x00c1',
    0x00d0: 'Canon.VRDOffset',
    0x00e0: 'Canon.SensorInfo',
    0x4001: 'Canon.ColorData',
}


class CanonExtractor(CameraExtractor):
    """Extractor for Canon maker notes.

    The note is a bare directory whose value offsets are relative to the
    start of the TIFF data, not to the note.
    """

    name = 'Canon'

    def can_handle(self, exif) -> bool:
        if self.maker_note(exif) is None:
            return False
        # A maker note without a Make tag is reported to the caller
        make = exif.get(exif_fields.MAKE)
        try:
            return make.string_val() == 'Canon'
        except TagValueError:
            return False

    def get_makernote_tags(self) -> Dict[int, str]:
        return CANON_FIELDS

    def parse(self, exif) -> None:
        if not self.can_handle(exif):
            return
        note = exif.get(exif_fields.MAKER_NOTE)
        data = bytes(note.val_offset) + note.val
        directory = self.decode_directory(data, note.val_offset, exif.tiff.order)
        exif.load_tags(directory, self.get_makernote_tags(), False)
        logger.debug("Merged %d Canon maker-note tags", len(directory))


class CameraSettings(NamedTuple):
    continuous_drive: str
    focus_mode: str
    record_mode: str
    metering_mode: str
    exposure_mode: str
    ae_setting: str
    lens: str


class ShotInfo(NamedTuple):
    """Raw ShotInfo values; see the properties for converted values"""
    auto_iso: Optional[int]
    base_iso: Optional[int]
    measured_ev: Optional[int]
    target_aperture: Optional[int]
    target_exposure_time: Optional[int]
    exposure_compensation: Optional[int]
    white_balance: Optional[int]
    sequence_number: Optional[int]
    camera_temperature: Optional[int]
    flash_exposure_comp: Optional[int]
    f_number: Optional[int]
    exposure_time: Optional[int]

    @property
    def auto_iso_value(self) -> Optional[float]:
        if self.auto_iso is None:
            return None
        return round(2 ** (self.auto_iso / 32) * 100, 1)

    @property
    def base_iso_value(self) -> Optional[float]:
        if self.base_iso is None:
            return None
        return round(2 ** (self.base_iso / 32) * 100 / 32, 1)

    @property
    def camera_temperature_c(self) -> Optional[int]:
        if not self.camera_temperature:
            return None
        return self.camera_temperature - 128


class AFInfo(NamedTuple):
    area_mode: str
    num_af_points: int
    valid_af_points: int
    canon_image_width: int
    canon_image_height: int
    af_image_width: int
    af_image_height: int
    area_widths: List[int]
    area_heights: List[int]
    x_positions: List[int]
    y_positions: List[int]
    points_in_focus: List[int]


class CanonRaw(NamedTuple):
    """Interpreted Canon maker-note data"""
    model_id: str
    serial_number: str
    image_type: str
    file_number: Optional[int]
    timezone: str
    timezone_city: str
    camera_settings: CameraSettings
    shot_info: Optional[ShotInfo]
    af_info: Optional[AFInfo]


def _signed(value: int) -> int:
    return value - 0x10000 if value >= 0x8000 else value


def _index(tag, i: int) -> Optional[int]:
    try:
        return tag.int_val(i)
    except TagValueError:
        return None


def _setting(tag, index: int) -> str:
    value = _index(tag, index)
    if value is None:
        return ''
    return canon_tags.camera_setting(index, value)


def camera_settings(tag) -> CameraSettings:
    lens_type = _index(tag, canon_tags.LENS_TYPE)
    return CameraSettings(
        continuous_drive=_setting(tag, canon_tags.CONTINUOUS_DRIVE),
        focus_mode=_setting(tag, canon_tags.FOCUS_MODE),
        record_mode=_setting(tag, canon_tags.RECORD_MODE),
        metering_mode=_setting(tag, canon_tags.METERING_MODE),
        exposure_mode=_setting(tag, canon_tags.EXPOSURE_MODE),
        ae_setting=_setting(tag, canon_tags.AE_SETTING),
        lens=canon_tags.canon_lens(lens_type) if lens_type is not None else '',
    )


def shot_info(tag) -> ShotInfo:
    def value(i):
        v = _index(tag, i)
        return _signed(v) if v is not None else None

    return ShotInfo(
        auto_iso=value(1),
        base_iso=value(2),
        measured_ev=value(3),
        target_aperture=value(4),
        target_exposure_time=value(5),
        exposure_compensation=value(6),
        white_balance=value(7),
        sequence_number=value(9),
        camera_temperature=value(12),
        flash_exposure_comp=value(15),
        f_number=value(21),
        exposure_time=value(22),
    )


def af_info(tag) -> AFInfo:
    """Decode an AFInfo2 array.

    Layout: size, area mode, point count, valid points, four image
    dimensions, then per-point widths, heights, x and y positions followed
    by the in-focus bit mask.
    """
    if tag.format is not Format.INT:
        raise TagValueError(f"{CANON_AF_INFO} does not hold integers")
    vals = list(tag.values)
    if len(vals) < 8:
        raise TagValueError(f"{CANON_AF_INFO} is too short ({len(vals)} values)")
    n = vals[2]
    if len(vals) < 8 + 4 * n:
        raise TagValueError(f"{CANON_AF_INFO} is too short for {n} AF points")

    pos = 8
    widths = vals[pos:pos + n]
    heights = vals[pos + n:pos + 2 * n]
    xs = [_signed(v) for v in vals[pos + 2 * n:pos + 3 * n]]
    ys = [_signed(v) for v in vals[pos + 3 * n:pos + 4 * n]]
    mask = vals[pos + 4 * n:pos + 4 * n + (n + 15) // 16]
    in_focus = [i for i in range(n)
                if i // 16 < len(mask) and (mask[i // 16] >> (i % 16)) & 1]

    return AFInfo(
        area_mode=canon_tags.AF_AREA_MODES.get(vals[1], ''),
        num_af_points=n,
        valid_af_points=vals[3],
        canon_image_width=vals[4],
        canon_image_height=vals[5],
        af_image_width=vals[6],
        af_image_height=vals[7],
        area_widths=widths,
        area_heights=heights,
        x_positions=xs,
        y_positions=ys,
        points_in_focus=in_focus,
    )


def _optional(exif, name: str):
    try:
        return exif.get(name)
    except TagNotPresentError:
        return None


def canon_raw_info(exif) -> CanonRaw:
    """Interpret the Canon fields merged into exif.

    Raises TagNotPresentError when the image carries no Canon camera settings.
    """
    settings = camera_settings(exif.get(CANON_CAMERA_SETTINGS))

    model = ''
    tag = _optional(exif, CANON_MODEL_ID)
    if tag is not None and _index(tag, 0) is not None:
        model = canon_tags.canon_model(tag.int_val(0))

    serial = ''
    tag = _optional(exif, CANON_SERIAL_NUMBER)
    if tag is not None:
        value = _index(tag, 0)
        serial = f"{value:010d}" if value is not None else ''

    image_type = ''
    tag = _optional(exif, CANON_IMAGE_TYPE)
    if tag is not None:
        try:
            image_type = tag.string_val().strip()
        except TagValueError:
            pass

    file_number = None
    tag = _optional(exif, CANON_FILE_NUMBER)
    if tag is not None:
        file_number = _index(tag, 0)

    timezone = city = ''
    tag = _optional(exif, CANON_TIME_INFO)
    if tag is not None:
        zone = _index(tag, 2)
        if zone is not None:
            timezone = canon_tags.TIMEZONE_OFFSETS.get(zone, '')
            city = canon_tags.TIMEZONE_CITIES.get(zone, '')

    tag = _optional(exif, CANON_SHOT_INFO)
    shot = shot_info(tag) if tag is not None else None

    af = None
    tag = _optional(exif, CANON_AF_INFO)
    if tag is not None:
        try:
            af = af_info(tag)
        except TagValueError as e:
            logger.debug("Ignoring AF info: %s", e)

    return CanonRaw(
        model_id=model,
        serial_number=serial,
        image_type=image_type,
        file_number=file_number,
        timezone=timezone,
        timezone_city=city,
        camera_settings=settings,
        shot_info=shot,
        af_info=af,
    )
