#!/usr/bin/env python3
"""
EXIF Value Models
Typed interpretations of common EXIF values (orientation, flash, exposure, metering)
"""

from enum import Enum, IntEnum
from fractions import Fraction
from typing import NamedTuple


class Orientation(IntEnum):
    """Image orientation as stored in the Orientation tag"""
    UNKNOWN = 0
    HORIZONTAL = 1
    MIRROR_HORIZONTAL = 2
    ROTATE_180 = 3
    MIRROR_VERTICAL = 4
    MIRROR_HORIZONTAL_ROTATE_270 = 5
    ROTATE_90 = 6
    MIRROR_HORIZONTAL_ROTATE_90 = 7
    ROTATE_270 = 8

    @classmethod
    def from_value(cls, value: int) -> 'Orientation':
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN

    @property
    def label(self) -> str:
        return _ORIENTATION_LABELS[self]


_ORIENTATION_LABELS = {
    Orientation.UNKNOWN: 'Unknown',
    Orientation.HORIZONTAL: 'Horizontal (normal)',
    Orientation.MIRROR_HORIZONTAL: 'Mirror horizontal',
    Orientation.ROTATE_180: 'Rotate 180',
    Orientation.MIRROR_VERTICAL: 'Mirror vertical',
    Orientation.MIRROR_HORIZONTAL_ROTATE_270: 'Mirror horizontal and rotate 270 CW',
    Orientation.ROTATE_90: 'Rotate 90 CW',
    Orientation.MIRROR_HORIZONTAL_ROTATE_90: 'Mirror horizontal and rotate 90 CW',
    Orientation.ROTATE_270: 'Rotate 270 CW',
}


class MeteringMode(IntEnum):
    UNKNOWN = 0
    AVERAGE = 1
    CENTER_WEIGHTED_AVERAGE = 2
    SPOT = 3
    MULTI_SPOT = 4
    MULTI_SEGMENT = 5
    PARTIAL = 6
    OTHER = 255

    @classmethod
    def from_value(cls, value: int) -> 'MeteringMode':
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN


class ExposureMode(IntEnum):
    """Exposure program selected on the camera (ExposureProgram tag)"""
    NOT_DEFINED = 0
    MANUAL = 1
    PROGRAM_AE = 2
    APERTURE_PRIORITY = 3
    SHUTTER_PRIORITY = 4
    CREATIVE = 5
    ACTION = 6
    PORTRAIT = 7
    LANDSCAPE = 8
    BULB = 9

    @classmethod
    def from_value(cls, value: int) -> 'ExposureMode':
        try:
            return cls(value)
        except ValueError:
            return cls.NOT_DEFINED


_FLASH_LABELS = {
    0x00: 'No Flash',
    0x01: 'Fired',
    0x05: 'Fired, Return not detected',
    0x07: 'Fired, Return detected',
    0x08: 'On, Did not fire',
    0x09: 'On, Fired',
    0x0D: 'On, Return not detected',
    0x0F: 'On, Return detected',
    0x10: 'Off, Did not fire',
    0x14: 'Off, Did not fire, Return not detected',
    0x18: 'Auto, Did not fire',
    0x19: 'Auto, Fired',
    0x1D: 'Auto, Fired, Return not detected',
    0x1F: 'Auto, Fired, Return detected',
    0x20: 'No flash function',
    0x30: 'Off, No flash function',
    0x41: 'Fired, Red-eye reduction',
    0x45: 'Fired, Red-eye reduction, Return not detected',
    0x47: 'Fired, Red-eye reduction, Return detected',
    0x49: 'On, Red-eye reduction',
    0x4D: 'On, Red-eye reduction, Return not detected',
    0x4F: 'On, Red-eye reduction, Return detected',
    0x50: 'Off, Red-eye reduction',
    0x58: 'Auto, Did not fire, Red-eye reduction',
    0x59: 'Auto, Fired, Red-eye reduction',
    0x5D: 'Auto, Fired, Red-eye reduction, Return not detected',
    0x5F: 'Auto, Fired, Red-eye reduction, Return detected',
}


class FlashMode(NamedTuple):
    """Raw value of the Flash tag"""
    value: int

    @property
    def fired(self) -> bool:
        return bool(self.value & 0x01)

    @property
    def red_eye_reduction(self) -> bool:
        return bool(self.value & 0x40)

    @property
    def label(self) -> str:
        return _FLASH_LABELS.get(self.value, f'Unknown (0x{self.value:02x})')

    def __str__(self) -> str:
        return self.label


class ExposureBias(NamedTuple):
    """Exposure compensation in EV as a signed rational"""
    numerator: int
    denominator: int

    def __float__(self) -> float:
        if self.denominator == 0:
            return float(self.numerator)
        return self.numerator / self.denominator

    def __str__(self) -> str:
        if self.numerator == 0 or self.denominator == 0:
            return '0'
        frac = Fraction(self.numerator, self.denominator)
        sign = '+' if frac > 0 else '-'
        return f"{sign}{abs(frac)}"


class ShutterSpeed(NamedTuple):
    """Exposure time in seconds as a rational"""
    numerator: int
    denominator: int

    @property
    def seconds(self) -> float:
        if self.denominator == 0:
            return float(self.numerator)
        return self.numerator / self.denominator

    def __float__(self) -> float:
        return self.seconds

    def __str__(self) -> str:
        if self.numerator == 0:
            return '0'
        if self.denominator == 0 or self.numerator >= self.denominator:
            return f"{self.seconds:g}"
        return str(Fraction(self.numerator, self.denominator))


class FileType(Enum):
    """Container formats recognised by the detector"""
    JPEG = 'jpeg'
    TIFF = 'tiff'
    RAW_EXIF = 'raw_exif'
    HEIF = 'heif'
