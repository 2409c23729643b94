#!/usr/bin/env python3
"""
Tests for the decode pipeline, the default EXIF parser and the Exif result object
"""

import io
import os
import struct
import sys
import unittest

import exifread

# Add parent directory to path to allow imports
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import exif_extractor
from camera_extractors.base_extractor import CameraExtractor
from camera_extractors.extractor_factory import ParserRegistry
from exif_errors import (DecodeError, LoadStage, MakerNoteError, ParserError, SubIfdErrors,
                         TagNotPresentError, is_critical_error, is_exif_error, is_gps_error,
                         is_interoperability_error, is_short_read_tag_value_error)
from exif_extractor import DecodeOptions, Exif, ExifExtractor
from tiff_codec import DataType, Tag
from tests.tiff_builder import TiffBuilder, heif_with_exif, jpeg_with_exif, simple_tiff

IFD0 = [
    (0x010F, DataType.ASCII, 'Canon'),
    (0x0110, DataType.ASCII, 'Canon EOS 5D Mark IV'),
    (0x0112, DataType.SHORT, 1),
    (0x0132, DataType.ASCII, '2023:06:01 12:30:45'),
]

EXIF_IFD = [
    (0x829A, DataType.RATIONAL, [(1, 250)]),
    (0x829D, DataType.RATIONAL, [(28, 10)]),
    (0x8827, DataType.SHORT, 400),
    (0x9003, DataType.ASCII, '2023:06:01 12:30:45'),
]

GPS_IFD = [
    (0x0001, DataType.ASCII, 'N'),
    (0x0002, DataType.RATIONAL, [(52, 1), (50, 1), (340118, 10000)]),
]


def camera_tiff(order='<'):
    return simple_tiff(IFD0, order, exif_entries=EXIF_IFD, gps_entries=GPS_IFD)


def tiff_with_pointer(tag_id, offset):
    return simple_tiff(IFD0 + [(tag_id, DataType.LONG, offset)])


class StopWalk(Exception):
    pass


class RecordingExtractor(CameraExtractor):
    """Remembers the fields it saw"""

    name = 'Recording'

    def __init__(self):
        self.seen = None

    def parse(self, exif):
        self.seen = set(exif)

    def get_makernote_tags(self):
        return {}


class FailingExtractor(CameraExtractor):
    name = 'Failing'

    def parse(self, exif):
        raise MakerNoteError(self.name, "corrupt payload")

    def get_makernote_tags(self):
        return {}


class TestDecode(unittest.TestCase):
    """Decoding of every supported container"""

    def check_camera_fields(self, x):
        self.assertEqual(x.get('Make').string_val(), 'Canon')
        self.assertEqual(x.get('Model').string_val(), 'Canon EOS 5D Mark IV')
        self.assertEqual(x.get('ExposureTime').rat2(0), (1, 250))
        self.assertEqual(x.get('ISOSpeedRatings').int_val(0), 400)
        self.assertEqual(x.get('GPSLatitudeRef').string_val(), 'N')

    def test_tiff_both_byte_orders(self):
        for order in ('<', '>'):
            with self.subTest(order=order):
                x = exif_extractor.decode(camera_tiff(order))
                self.check_camera_fields(x)
                self.assertEqual(x.tiff.order, order)

    def test_jpeg(self):
        self.check_camera_fields(exif_extractor.decode(jpeg_with_exif(camera_tiff())))

    def test_jpeg_with_xmp_first(self):
        data = jpeg_with_exif(camera_tiff(), xmp=b'<x:xmpmeta/>')
        self.check_camera_fields(exif_extractor.decode(data))

    def test_raw_exif(self):
        self.check_camera_fields(exif_extractor.decode(b'Exif\x00\x00' + camera_tiff()))

    def test_heif(self):
        self.check_camera_fields(exif_extractor.decode(heif_with_exif(camera_tiff())))

    def test_file_object(self):
        self.check_camera_fields(exif_extractor.decode(io.BytesIO(jpeg_with_exif(camera_tiff()))))

    def test_matches_exifread(self):
        data = jpeg_with_exif(camera_tiff())
        tags = exifread.process_file(io.BytesIO(data), details=False)
        x = exif_extractor.decode(data)
        self.assertEqual(x.get_string('Make'), str(tags['Image Make']))
        self.assertEqual(x.get_string('Model'), str(tags['Image Model']))

    def test_raw_is_the_tiff_block(self):
        tiff = camera_tiff()
        x = exif_extractor.decode(jpeg_with_exif(tiff))
        self.assertEqual(x.raw, tiff)

    def test_short_input(self):
        with self.assertRaises(DecodeError):
            exif_extractor.decode(b'II*\x00')

    def test_no_exif_in_jpeg(self):
        data = b'\xff\xd8\xff\xe0\x00\x04ab\xff\xd9'
        with self.assertRaises(DecodeError):
            exif_extractor.decode(data)

    def test_bad_tiff_is_decode_error(self):
        with self.assertRaises(DecodeError):
            exif_extractor.decode(b'II*\x00\xff\x00\x00\x00')

    def test_no_directories(self):
        with self.assertRaises(DecodeError) as ctx:
            exif_extractor.decode(b'II*\x00\x00\x00\x00\x00')
        self.assertIn('invalid exif data', str(ctx.exception))

    def test_max_exif_size_truncates_input(self):
        data = camera_tiff()
        with self.assertRaises(DecodeError) as ctx:
            exif_extractor.decode(data, DecodeOptions(max_exif_size=len(data) - 4))
        self.assertTrue(is_critical_error(ctx.exception))

    def test_short_read_is_detectable(self):
        entry = struct.pack('<HHII', 0x010F, DataType.ASCII, 40, 26)
        data = b'II*\x00' + struct.pack('<I', 8) + struct.pack('<H', 1) + entry + struct.pack('<I', 0)
        with self.assertRaises(DecodeError) as ctx:
            exif_extractor.decode(data)
        self.assertTrue(is_short_read_tag_value_error(ctx.exception))

    def test_non_positive_max_size_uses_default(self):
        self.assertEqual(DecodeOptions(max_exif_size=0).max_exif_size, exif_extractor.DEFAULT_MAX_EXIF_SIZE)
        self.assertEqual(DecodeOptions(max_exif_size=-1).max_exif_size, exif_extractor.DEFAULT_MAX_EXIF_SIZE)

    def test_decoding_is_repeatable(self):
        data = jpeg_with_exif(camera_tiff())
        first = exif_extractor.decode(data)
        second = exif_extractor.decode(data)
        self.assertEqual(dict(first.items()), dict(second.items()))

    def test_decode_with_parse_header(self):
        data = b'\x00\x01garbage before the header' + camera_tiff()
        self.check_camera_fields(exif_extractor.decode_with_parse_header(data))


class TestSubIfdErrors(unittest.TestCase):
    """Failures in the Exif, GPS and Interoperability sub-IFDs are partial"""

    def test_gps_pointer_past_end(self):
        with self.assertRaises(SubIfdErrors) as ctx:
            exif_extractor.decode(tiff_with_pointer(0x8825, 0xFFFFFF))
        err = ctx.exception
        self.assertFalse(is_critical_error(err))
        self.assertTrue(is_gps_error(err))
        self.assertFalse(is_exif_error(err))
        self.assertIn(LoadStage.GPS, err)
        self.assertEqual(err.exif.get('Make').string_val(), 'Canon')

    def test_exif_fields_survive_bad_gps_pointer(self):
        data = simple_tiff(IFD0 + [(0x8825, DataType.LONG, 0xFFFFFF)], exif_entries=EXIF_IFD)
        with self.assertRaises(SubIfdErrors) as ctx:
            exif_extractor.decode(data)
        err = ctx.exception
        self.assertTrue(is_gps_error(err))
        self.assertFalse(is_exif_error(err))
        self.assertEqual(err.exif.get('ExposureTime').rat2(0), (1, 250))
        self.assertEqual(err.exif.get('ISOSpeedRatings').int_val(0), 400)
        self.assertEqual(err.exif.get_string('DateTimeOriginal'), '2023:06:01 12:30:45')
        self.assertNotIn('GPSLatitudeRef', err.exif)

    def test_truncated_exif_directory(self):
        builder = TiffBuilder()
        bad = builder.add_blob(struct.pack('<H', 30) + b'\x00' * 8)
        ifd0 = builder.add_ifd(IFD0 + [(0x8769, DataType.LONG, bad), (0xA005, DataType.LONG, 0xFFFFFF)])
        with self.assertRaises(SubIfdErrors) as ctx:
            exif_extractor.decode(builder.build(ifd0))
        self.assertTrue(is_exif_error(ctx.exception))
        self.assertTrue(is_interoperability_error(ctx.exception))
        self.assertFalse(is_gps_error(ctx.exception))

    def test_remaining_extractors_still_run(self):
        recorder = RecordingExtractor()
        registry = ParserRegistry(ExifExtractor(), recorder)
        with self.assertRaises(SubIfdErrors) as ctx:
            exif_extractor.decode(tiff_with_pointer(0x8825, 0xFFFFFF), registry=registry)
        self.assertIn('Make', recorder.seen)
        self.assertIsNotNone(ctx.exception.exif)

    def test_pointer_without_integer_is_skipped(self):
        data = simple_tiff(IFD0 + [(0x8825, DataType.ASCII, 'oops')])
        x = exif_extractor.decode(data)
        self.assertEqual(x.get_string('Make'), 'Canon')


class TestParserChain(unittest.TestCase):

    def test_failing_extractor_stops_decoding(self):
        recorder = RecordingExtractor()
        registry = ParserRegistry(ExifExtractor(), FailingExtractor(), recorder)
        with self.assertRaises(ParserError) as ctx:
            exif_extractor.decode(camera_tiff(), registry=registry)
        err = ctx.exception
        self.assertIn('parser 1 failed', str(err))
        self.assertIsInstance(err.__cause__, MakerNoteError)
        self.assertEqual(err.exif.get('Make').string_val(), 'Canon')
        self.assertIsNone(recorder.seen)
        self.assertTrue(is_critical_error(err))

    def test_extractors_run_in_order(self):
        recorder = RecordingExtractor()
        exif_extractor.decode(camera_tiff(), registry=ParserRegistry(ExifExtractor(), recorder))
        self.assertIn('ISOSpeedRatings', recorder.seen)

    def test_empty_registry_loads_nothing(self):
        x = exif_extractor.decode(camera_tiff(), registry=ParserRegistry())
        self.assertEqual(len(x), 0)


class TestExifObject(unittest.TestCase):

    def setUp(self):
        self.x = exif_extractor.decode(camera_tiff())

    def test_get_missing(self):
        with self.assertRaises(TagNotPresentError) as ctx:
            self.x.get('LensModel')
        self.assertEqual(ctx.exception.field, 'LensModel')

    def test_update(self):
        tag = Tag(0x0112, DataType.SHORT, 1, b'\x06\x00')
        self.x.update('Orientation', tag)
        self.assertIs(self.x.get('Orientation'), tag)
        with self.assertRaises(TagNotPresentError):
            self.x.update('LensModel', tag)

    def test_walk(self):
        names = []
        self.x.walk(lambda name, tag: names.append(name))
        self.assertEqual(sorted(names), sorted(self.x))

    def test_walk_aborts_on_exception(self):
        calls = []

        def walker(name, tag):
            calls.append(name)
            raise StopWalk(name)

        with self.assertRaises(StopWalk):
            self.x.walk(walker)
        self.assertEqual(len(calls), 1)

    def test_str_lists_fields(self):
        text = str(self.x)
        self.assertIn('Make: "Canon"', text)
        self.assertIn('ISOSpeedRatings: 400', text)

    def test_contains_and_len(self):
        self.assertIn('Model', self.x)
        self.assertNotIn('LensModel', self.x)
        self.assertEqual(len(self.x), len(list(self.x)))

    def test_unknown_tags(self):
        data = simple_tiff(IFD0 + [(0xABCD, DataType.SHORT, 7)])
        self.assertNotIn('UnknownTag_abcd', exif_extractor.decode(data))
        x = exif_extractor.decode(data, DecodeOptions(keep_unknown_tags=True))
        self.assertEqual(x.get('UnknownTag_abcd').int_val(), 7)

    def test_load_tags_last_write_wins(self):
        x = Exif(self.x.tiff, self.x.raw)
        x.load_tags(self.x.tiff.dirs[0], {0x010F: 'Make', 0x0110: 'Make'}, False)
        self.assertEqual(x.get('Make').string_val(), 'Canon EOS 5D Mark IV')


if __name__ == "__main__":
    unittest.main()
