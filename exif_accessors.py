#!/usr/bin/env python3
"""
EXIF Accessors
Convenience getters that turn decoded tags into sizes, exposure values, timestamps and GPS positions
"""

import io
import logging
import math
import re
from datetime import datetime, timedelta, timezone
from typing import NamedTuple, Optional, Tuple

from PIL import Image, UnidentifiedImageError

import exif_fields
from exif_errors import CoordinateFormatError, TagNotPresentError, TagValueError
from exif_models import ExposureBias, ExposureMode, FlashMode, MeteringMode, Orientation, ShutterSpeed
from tiff_codec import DataType, Format

logger = logging.getLogger('exif_accessors')

EXIF_DATE_FORMAT = '%Y:%m:%d %H:%M:%S'
GPS_DATE_FORMAT = '%Y:%m:%d'

# Compression values of embedded previews that can be handed to an image decoder
PREVIEW_COMPRESSION_VALUES = {
    6: 'JPEG (old-style)',
    7: 'JPEG',
    99: 'JPEG',
    34712: 'JPEG 2000',
    34892: 'Lossy JPEG',
    34934: 'JPEG XR',
    34927: 'WebP',
    34933: 'PNG',
}

_NUMBER_RE = re.compile(r'^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$')
_OFFSET_TIME_RE = re.compile(r'^([+-])(\d{2}):(\d{2})$')


class PreviewImageTag(NamedTuple):
    """Field names locating one embedded preview image"""
    start_field: str
    length_field: str
    compression_field: Optional[str] = None


IFD0_PREVIEW_IMAGE = PreviewImageTag(exif_fields.PREVIEW_IMAGE_START, exif_fields.PREVIEW_IMAGE_LENGTH)
IFD1_THUMBNAIL_IMAGE = PreviewImageTag(exif_fields.THUMB_JPEG_INTERCHANGE_FORMAT,
                                       exif_fields.THUMB_JPEG_INTERCHANGE_FORMAT_LENGTH)


def _parse_number(text: str, original: str) -> float:
    if not _NUMBER_RE.match(text):
        raise CoordinateFormatError(f"unknown coordinate format: {original}")
    return float(text)


def parse_tag_degrees_string(s: str) -> float:
    """Parse a coordinate stored as text instead of three rationals.

    Accepts ``d,m,s`` and the split-decimal form ``d,d',m,m',s,s'`` with
    either ',' or ';' as separator. Minutes and seconds take the sign of the
    degrees.

    Raises:
        CoordinateFormatError: The string has another shape or a part is not a number
    """
    parts = [p for p in re.split(r'[,;]', s) if p]
    if len(parts) == 6:
        parts = [f"{parts[0]}.{parts[1]}", f"{parts[2]}.{parts[3]}", f"{parts[4]}.{parts[5]}"]
    elif len(parts) != 3:
        raise CoordinateFormatError(f"unknown coordinate format: {s}")

    degrees = _parse_number(parts[0], s)
    minutes = math.copysign(_parse_number(parts[1], s), degrees)
    seconds = math.copysign(_parse_number(parts[2], s), degrees)
    return degrees + minutes / 60.0 + seconds / 3600.0


def tag_degrees(tag) -> float:
    """Decimal degrees from a GPS coordinate tag"""
    if tag.format is Format.RAT:
        if tag.count == 0:
            raise TagValueError("empty coordinate tag")
        v = [tag.rat_float(i) for i in range(min(tag.count, 3))]
        v += [0.0] * (3 - len(v))
        return v[0] + v[1] / 60 + v[2] / 3600.0
    if tag.format is Format.STRING:
        # Some phones write the coordinate as text
        return parse_tag_degrees_string(tag.string_val())
    raise TagValueError("malformed EXIF tag degrees")


def _fixed_zone(minutes: int) -> timezone:
    return timezone(timedelta(minutes=minutes))


class ExifAccessorsMixin:
    """Derived values computed from the fields of a decoded Exif result.

    Expects ``get(name)``, ``fields`` and ``raw`` on the host class. Absent
    fields raise TagNotPresentError, unusable values raise TagValueError.
    """

    def _first(self, names):
        if not names:
            raise ValueError("at least one field name is required")
        for name in names:
            if name in self.fields:
                return self.fields[name]
        raise TagNotPresentError(names[-1])

    def image_size(self) -> Tuple[int, int]:
        """Width and height from ImageWidth/ImageLength or the Pixel dimension tags; 0 when absent"""
        if exif_fields.IMAGE_WIDTH in self.fields:
            names = (exif_fields.IMAGE_WIDTH, exif_fields.IMAGE_LENGTH)
        elif exif_fields.PIXEL_X_DIMENSION in self.fields:
            names = (exif_fields.PIXEL_X_DIMENSION, exif_fields.PIXEL_Y_DIMENSION)
        else:
            return 0, 0

        size = []
        for name in names:
            try:
                size.append(self.get(name).int_val(0))
            except (TagNotPresentError, TagValueError):
                size.append(0)
        return size[0], size[1]

    def orientation(self) -> Orientation:
        return Orientation.from_value(self.get(exif_fields.ORIENTATION).int_val(0))

    def flash_mode(self) -> FlashMode:
        return FlashMode(self.get(exif_fields.FLASH).int_val(0))

    def exposure_bias(self) -> ExposureBias:
        return ExposureBias(*self.get(exif_fields.EXPOSURE_BIAS_VALUE).rat2(0))

    def aperture(self) -> float:
        """F-number; a zero denominator yields the numerator"""
        return self.get(exif_fields.F_NUMBER).rat_float(0)

    def iso_speed(self) -> int:
        return self.get(exif_fields.ISO_SPEED_RATINGS).int_val(0)

    def shutter_speed(self) -> ShutterSpeed:
        return ShutterSpeed(*self.get(exif_fields.EXPOSURE_TIME).rat2(0))

    def metering_mode(self) -> MeteringMode:
        return MeteringMode.from_value(self.get(exif_fields.METERING_MODE).int_val(0))

    def exposure_mode(self) -> ExposureMode:
        return ExposureMode.from_value(self.get(exif_fields.EXPOSURE_PROGRAM).int_val(0))

    def get_string(self, name: str) -> str:
        """String value of a field with surrounding whitespace removed"""
        return self.get(name).string_val().strip()

    def get_strings(self, *names: str) -> str:
        """String value of the first present field among names"""
        return self._first(names).string_val().strip()

    def get_uints(self, *names: str) -> int:
        """Integer value of the first present field among names"""
        return self._first(names).int_val(0)

    def date_time(self, *names: str) -> datetime:
        """Capture time of the photo.

        Reads the first present field among names (DateTimeOriginal, then
        DateTime by default). SubSecTimeOriginal adds sub-second precision
        and OffsetTimeOriginal a fixed time zone; without it the result is
        naive.

        Returns:
            The parsed datetime

        Raises:
            TagNotPresentError: None of the fields is present
            TagValueError: The value is not a string or not an Exif date
        """
        if not names:
            names = (exif_fields.DATE_TIME_ORIGINAL, exif_fields.DATE_TIME)
        tag = self._first(names)
        if tag.format is not Format.STRING:
            raise TagValueError("DateTime[Original] not in string format")

        text = tag.string_val()
        try:
            value = datetime.strptime(text, EXIF_DATE_FORMAT)
        except ValueError as e:
            raise TagValueError(f"cannot parse date {text!r}: {e}") from e

        sub_sec = self._optional_string(exif_fields.SUB_SEC_TIME_ORIGINAL)
        if sub_sec and sub_sec.isdigit():
            value = value.replace(microsecond=int(sub_sec[:6].ljust(6, '0')))

        offset = self._optional_string(exif_fields.OFFSET_TIME_ORIGINAL)
        if offset:
            match = _OFFSET_TIME_RE.match(offset)
            if match:
                minutes = int(match.group(2)) * 60 + int(match.group(3))
                if match.group(1) == '-':
                    minutes = -minutes
                value = value.replace(tzinfo=_fixed_zone(minutes))
            else:
                logger.debug("Ignoring malformed %s %r", exif_fields.OFFSET_TIME_ORIGINAL, offset)
        return value

    def _optional_string(self, name: str) -> Optional[str]:
        try:
            return self.get(name).string_val().strip()
        except (TagNotPresentError, TagValueError):
            return None

    def time_zone(self) -> timezone:
        """Time zone recorded in Canon.TimeInfo"""
        # TODO: read Nikon.WorldTime as well
        info = self.get('Canon.TimeInfo')
        if info.count < 2:
            raise TagValueError("Canon.TimeInfo does not contain timezone")
        return _fixed_zone(info.int_val(1))

    def _gps_coordinate(self, coord_field: str, ref_field: str, label: str) -> float:
        tag = self.get(coord_field)
        ref_tag = self.get(ref_field)
        try:
            coord = tag_degrees(tag)
        except TagValueError as e:
            raise type(e)(f"cannot parse {label}: {e}") from e
        try:
            ref = ref_tag.string_val()
        except TagValueError as e:
            raise TagValueError(f"cannot parse {label} reference: {e}") from e

        if ref in ('S', 'W'):
            coord *= -1.0
        return coord

    def lat_long(self) -> Tuple[float, float]:
        """Latitude and longitude in signed decimal degrees"""
        lat = self._gps_coordinate(exif_fields.GPS_LATITUDE, exif_fields.GPS_LATITUDE_REF, 'latitude')
        long = self._gps_coordinate(exif_fields.GPS_LONGITUDE, exif_fields.GPS_LONGITUDE_REF, 'longitude')
        return lat, long

    def gps_altitude(self) -> float:
        """Altitude in metres, negative below sea level"""
        alt = self.get(exif_fields.GPS_ALTITUDE)
        alt_ref = self.get(exif_fields.GPS_ALTITUDE_REF)
        try:
            ref = alt_ref.int_val(0)
            value = alt.rat_float(0)
        except TagValueError as e:
            raise TagValueError(f"cannot parse GPS Altitude: {e}") from e
        if ref == 1:
            value = -value
        return value

    def gps_time_stamp(self) -> datetime:
        """UTC time of the GPS fix from GPSDateStamp and GPSTimeStamp"""
        date_tag = self.get(exif_fields.GPS_DATE_STAMP)
        time_tag = self.get(exif_fields.GPS_TIME_STAMP)
        try:
            day = datetime.strptime(date_tag.string_val().strip(), GPS_DATE_FORMAT)
        except ValueError as e:
            raise TagValueError(f"cannot parse GPS date: {e}") from e
        day = day.replace(tzinfo=timezone.utc)

        try:
            hour = int(time_tag.rat_float(0))
            minute = int(time_tag.rat_float(1))
        except TagValueError as e:
            raise TagValueError(f"cannot parse GPS time: {e}") from e
        try:
            second = time_tag.rat_float(2)
        except TagValueError:
            return day
        return day + timedelta(hours=hour, minutes=minute, seconds=round(second, 3))

    def focal_length(self, name: str = exif_fields.FOCAL_LENGTH) -> float:
        """Focal length in millimetres.

        Besides rationals, some maker notes store a SHORT pair whose first
        value selects the scale of the second.
        """
        tag = self.get(name)
        if tag.type is DataType.RATIONAL:
            return tag.rat_float(0)
        if tag.type is DataType.SHORT:
            a = tag.int_val(0)
            if tag.count < 2:
                return float(a)
            b = tag.int_val(1)
            digits = len(str(b))
            if a == 0:
                return float(b)
            if a == 2 and digits == 4:
                return b / 1000
            if a == 2 and digits == 3:
                return b / 100
        raise TagValueError("cannot parse FocalLength")

    def jpeg_thumbnail(self) -> Tuple[int, int]:
        """Offset and length of the IFD1 JPEG thumbnail inside ``raw``"""
        start = self.get(exif_fields.THUMB_JPEG_INTERCHANGE_FORMAT).int_val(0)
        length = self.get(exif_fields.THUMB_JPEG_INTERCHANGE_FORMAT_LENGTH).int_val(0)
        return start, length

    def preview_image(self, *candidates: PreviewImageTag) -> Tuple[int, int]:
        """Offset and length of the largest embedded preview.

        The IFD0 preview and the IFD1 thumbnail are always considered after
        the given candidates. Candidates naming a compression field are only
        used when the compression is an image format. Returns (0, 0) when
        nothing is found.
        """
        best = (0, 0)
        for candidate in candidates + (IFD0_PREVIEW_IMAGE, IFD1_THUMBNAIL_IMAGE):
            if candidate.compression_field and candidate.compression_field in self.fields:
                try:
                    compression = self.fields[candidate.compression_field].int_val(0)
                except TagValueError:
                    continue
                if compression not in PREVIEW_COMPRESSION_VALUES:
                    continue
            try:
                start = self.get(candidate.start_field).int_val(0)
                length = self.get(candidate.length_field).int_val(0)
            except (TagNotPresentError, TagValueError):
                continue
            if length > best[1]:
                best = (start, length)
        return best

    def thumbnail_bytes(self) -> bytes:
        start, length = self.jpeg_thumbnail()
        if start + length > len(self.raw):
            raise TagValueError(f"thumbnail at {start} with {length} bytes is past the end of data")
        return self.raw[start:start + length]

    def thumbnail_image(self) -> Image.Image:
        """The IFD1 thumbnail opened with Pillow"""
        try:
            return Image.open(io.BytesIO(self.thumbnail_bytes()))
        except UnidentifiedImageError as e:
            raise TagValueError(f"thumbnail is not a readable image: {e}") from e
