#!/usr/bin/env python3
"""
Tests for the Canon maker-note extractor and the Canon value interpretation
"""

import os
import sys
import unittest
from datetime import timedelta, timezone

# Add parent directory to path to allow imports
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import exif_extractor
from camera_extractors import canon_raw_info
from camera_extractors import canon_tags
from camera_extractors.canon_extractor import af_info
from exif_errors import MakerNoteError, ParserError, TagNotPresentError, TagValueError
from tiff_codec import DataType, Tag
from tests.tiff_builder import layout_ifd, simple_tiff


def camera_settings():
    values = [0] * 40
    values[0] = 80
    values[canon_tags.CONTINUOUS_DRIVE] = 1
    values[canon_tags.FOCUS_MODE] = 0
    values[canon_tags.RECORD_MODE] = 6
    values[canon_tags.METERING_MODE] = 3
    values[canon_tags.EXPOSURE_MODE] = 3
    values[canon_tags.LENS_TYPE] = 1
    values[canon_tags.AE_SETTING] = 1
    return values


def shot_info():
    values = [0] * 34
    values[0] = 68
    values[1] = 32
    values[2] = 160
    values[9] = 3
    values[12] = 150
    return values


AF_INFO = [
    48, 2, 2, 2, 6000, 4000, 6000, 4000,
    100, 100,
    80, 80,
    0xFFF6, 10,
    5, 0xFFFB,
    0b10,
]

CANON_ENTRIES = [
    (0x0001, DataType.SHORT, camera_settings()),
    (0x0002, DataType.SHORT, [0, 50, 0, 0]),
    (0x0004, DataType.SHORT, shot_info()),
    (0x0006, DataType.ASCII, 'Canon EOS 5D Mark IV'),
    (0x0008, DataType.LONG, 1001234),
    (0x000c, DataType.LONG, 12345),
    (0x0010, DataType.LONG, 0x80000349),
    (0x0026, DataType.SHORT, AF_INFO),
    (0x0035, DataType.SLONG, [16, 60, 20, 0]),
    (0x00b4, DataType.SHORT, 1),
]


def canon_note(entries=CANON_ENTRIES):
    # Value offsets inside the note are relative to the TIFF header
    return lambda offset: layout_ifd(entries, '<', offset)


def canon_tiff(make='Canon', note=None, make_type=DataType.ASCII):
    ifd0 = [(0x0110, DataType.ASCII, 'Canon EOS 5D Mark IV')]
    if make is not None:
        ifd0.append((0x010F, make_type, make))
    return simple_tiff(ifd0, exif_entries=[
        (0x920A, DataType.RATIONAL, [(24, 1)]),
        (0xA001, DataType.SHORT, 65535),
        (0x927C, DataType.UNDEFINED, note or canon_note()),
    ])


class TestCanonExtractor(unittest.TestCase):

    def test_fields_are_merged(self):
        x = exif_extractor.decode(canon_tiff())
        self.assertEqual(x.get_string('Canon.ImageType'), 'Canon EOS 5D Mark IV')
        self.assertEqual(x.get('Canon.FileNumber').int_val(), 1001234)
        self.assertEqual(x.get('Canon.CameraSettings').count, 40)

    def test_maker_note_refines_exif_fields(self):
        x = exif_extractor.decode(canon_tiff())
        self.assertEqual(x.get('FocalLength').type, DataType.SHORT)
        self.assertEqual(x.focal_length(), 50.0)
        self.assertEqual(x.get('ColorSpace').int_val(), 1)
        self.assertNotIn('Canon.FocalLength', x)

    def test_exif_fields_kept_for_other_makes(self):
        x = exif_extractor.decode(canon_tiff(make='Nikon'))
        self.assertEqual(x.get('FocalLength').type, DataType.RATIONAL)
        self.assertEqual(x.focal_length(), 24.0)
        self.assertEqual(x.get('ColorSpace').int_val(), 65535)

    def test_time_zone(self):
        x = exif_extractor.decode(canon_tiff())
        self.assertEqual(x.time_zone(), timezone(timedelta(hours=1)))

    def test_make_must_match_exactly(self):
        for make in ('CANON', 'Canon Inc.', 'Nikon'):
            with self.subTest(make=make):
                x = exif_extractor.decode(canon_tiff(make=make))
                self.assertNotIn('Canon.CameraSettings', x)

    def test_non_string_make_is_ignored(self):
        x = exif_extractor.decode(canon_tiff(make=7, make_type=DataType.SHORT))
        self.assertNotIn('Canon.CameraSettings', x)

    def test_missing_make_is_reported(self):
        with self.assertRaises(ParserError) as ctx:
            exif_extractor.decode(canon_tiff(make=None))
        self.assertIsInstance(ctx.exception.__cause__, TagNotPresentError)
        self.assertEqual(ctx.exception.__cause__.field, 'Make')

    def test_malformed_note(self):
        with self.assertRaises(ParserError) as ctx:
            exif_extractor.decode(canon_tiff(note=b'\x40\x00' + b'\x00' * 10))
        cause = ctx.exception.__cause__
        self.assertIsInstance(cause, MakerNoteError)
        self.assertEqual(cause.vendor, 'Canon')


class TestCanonRawInfo(unittest.TestCase):

    def setUp(self):
        self.info = canon_raw_info(exif_extractor.decode(canon_tiff()))

    def test_camera_settings(self):
        settings = self.info.camera_settings
        self.assertEqual(settings.continuous_drive, 'Continuous')
        self.assertEqual(settings.focus_mode, 'One-shot AF')
        self.assertEqual(settings.record_mode, 'CR2')
        self.assertEqual(settings.metering_mode, 'Evaluative')
        self.assertEqual(settings.exposure_mode, 'Aperture-priority AE')
        self.assertEqual(settings.ae_setting, 'Exposure Compensation')
        self.assertEqual(settings.lens, 'Canon EF 50mm f/1.8')

    def test_identity(self):
        self.assertEqual(self.info.model_id, 'EOS 5D Mark IV')
        self.assertEqual(self.info.serial_number, '0000012345')
        self.assertEqual(self.info.image_type, 'Canon EOS 5D Mark IV')
        self.assertEqual(self.info.file_number, 1001234)
        self.assertEqual(self.info.timezone, '+0:00')
        self.assertEqual(self.info.timezone_city, 'London')

    def test_shot_info(self):
        shot = self.info.shot_info
        self.assertEqual(shot.auto_iso_value, 200.0)
        self.assertEqual(shot.base_iso_value, 100.0)
        self.assertEqual(shot.sequence_number, 3)
        self.assertEqual(shot.camera_temperature_c, 22)

    def test_af_info(self):
        af = self.info.af_info
        self.assertEqual(af.area_mode, 'Single-point AF')
        self.assertEqual(af.num_af_points, 2)
        self.assertEqual(af.x_positions, [-10, 10])
        self.assertEqual(af.y_positions, [5, -5])
        self.assertEqual(af.points_in_focus, [1])

    def test_af_info_too_short(self):
        tag = Tag(0x0026, DataType.SHORT, 4, b'\x08\x00\x02\x00\x09\x00\x02\x00')
        with self.assertRaises(TagValueError):
            af_info(tag)

    def test_lookups(self):
        self.assertEqual(canon_tags.canon_model(0x805), 'PowerShot SX70 HS')
        self.assertEqual(canon_tags.canon_lens(138), 'Canon EF 28-80mm f/2.8-4L')
        self.assertEqual(canon_tags.canon_lens(0xFFFF), 'n/a')

    def test_lookup_misses_are_empty(self):
        self.assertEqual(canon_tags.canon_lens(9999), '')
        self.assertEqual(canon_tags.canon_model(0x12345678), '')
        self.assertEqual(canon_tags.camera_setting(canon_tags.FOCUS_MODE, 999), '')

    def test_without_camera_settings(self):
        x = exif_extractor.decode(simple_tiff([(0x010F, DataType.ASCII, 'Canon')]))
        with self.assertRaises(TagNotPresentError):
            canon_raw_info(x)


if __name__ == "__main__":
    unittest.main()
