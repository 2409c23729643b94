#!/usr/bin/env python3
"""
Tests for container detection and TIFF block extraction
"""

import os
import struct
import sys
import unittest

# Add parent directory to path to allow imports
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import container_detector
import exif_extractor
import heif_reader
from exif_errors import DecodeError, ExifHeaderError, HeifError, NoExifError
from exif_models import FileType
from tiff_codec import DataType
from tests.tiff_builder import (app1_segment, box, full_box, heif_with_exif, jpeg_with_exif, simple_tiff,
                                small_jpeg)


def sample_tiff():
    return simple_tiff([(0x010F, DataType.ASCII, 'Canon'), (0x0110, DataType.ASCII, 'EOS 5D')])


class TestDetectFileType(unittest.TestCase):

    def test_signatures(self):
        cases = {
            b'II*\x00\x08\x00\x00\x00': FileType.TIFF,
            b'MM\x00*\x00\x00\x00\x08': FileType.TIFF,
            b'Exif\x00\x00II': FileType.RAW_EXIF,
            b'\x00\x00\x00\x18ftyp': FileType.HEIF,
            b'\xff\xd8\xff\xe1\x00\x10Ex': FileType.JPEG,
            b'garbage!': FileType.JPEG,
        }
        for header, expected in cases.items():
            with self.subTest(header=header):
                self.assertIs(container_detector.detect_file_type(header), expected)


class TestExtractTiff(unittest.TestCase):

    def test_tiff_is_used_as_is(self):
        tiff = sample_tiff()
        self.assertEqual(container_detector.extract_tiff(tiff, FileType.TIFF), tiff)

    def test_raw_exif(self):
        tiff = sample_tiff()
        self.assertEqual(container_detector.extract_tiff(b'Exif\x00\x00' + tiff, FileType.RAW_EXIF), tiff)

    def test_raw_exif_bad_marker(self):
        with self.assertRaises(ExifHeaderError):
            container_detector.extract_tiff(b'Exif\x01\x00' + sample_tiff(), FileType.RAW_EXIF)
        with self.assertRaises(ExifHeaderError):
            container_detector.strip_exif_marker(b'Exif')

    def test_jpeg(self):
        tiff = sample_tiff()
        self.assertEqual(container_detector.extract_tiff(jpeg_with_exif(tiff), FileType.JPEG), tiff)

    def test_jpeg_skips_xmp_segment(self):
        tiff = sample_tiff()
        data = jpeg_with_exif(tiff, xmp=b'<x:xmpmeta/>')
        self.assertEqual(container_detector.extract_tiff(data, FileType.JPEG), tiff)

    def test_jpeg_without_exif(self):
        with self.assertRaises(NoExifError):
            container_detector.extract_tiff(small_jpeg(), FileType.JPEG)

    def test_jpeg_truncated_segment(self):
        segment = app1_segment(b'Exif\x00\x00' + sample_tiff())
        data = b'\xff\xd8' + segment[:20]
        with self.assertRaises(ExifHeaderError):
            container_detector.extract_tiff(data, FileType.JPEG)

    def test_errors_are_decode_errors(self):
        self.assertTrue(issubclass(NoExifError, DecodeError))
        self.assertTrue(issubclass(ExifHeaderError, DecodeError))
        self.assertTrue(issubclass(HeifError, DecodeError))

    def test_heif_with_marker(self):
        tiff = sample_tiff()
        self.assertEqual(container_detector.extract_tiff(heif_with_exif(tiff), FileType.HEIF), tiff)

    def test_heif_marker_is_stripped(self):
        tiff = sample_tiff()
        data = heif_with_exif(tiff, skip_marker=False)
        self.assertEqual(container_detector.extract_tiff(data, FileType.HEIF), tiff)


class TestHeifReader(unittest.TestCase):

    def test_exif_block_skips_header_offset(self):
        tiff = sample_tiff()
        self.assertEqual(heif_reader.extract_exif(heif_with_exif(tiff)), tiff)

    def test_exif_block_keeps_marker_when_not_skipped(self):
        tiff = sample_tiff()
        block = heif_reader.extract_exif(heif_with_exif(tiff, skip_marker=False))
        self.assertEqual(block, b'Exif\x00\x00' + tiff)

    def test_missing_meta(self):
        data = b'\x00\x00\x00\x10ftypheic\x00\x00\x00\x00'
        with self.assertRaises(HeifError):
            heif_reader.extract_exif(data)

    def test_truncated(self):
        data = heif_with_exif(sample_tiff())
        with self.assertRaises(HeifError):
            heif_reader.extract_exif(data[:60])

    def test_zero_large_box_size(self):
        infe = struct.pack('>I', 1) + b'infe' + struct.pack('>Q', 0)
        data = heif_with_items(infe, 0xFFFFFFFF)
        with self.assertRaises(HeifError):
            heif_reader.extract_exif(data)
        with self.assertRaises(DecodeError):
            exif_extractor.decode(data)

    def test_box_shorter_than_header(self):
        infe = struct.pack('>I', 4) + b'infe' + b'\x02\x00\x00\x00'
        with self.assertRaises(HeifError):
            heif_reader.extract_exif(heif_with_items(infe, 2))

    def test_item_count_larger_than_iinf(self):
        infe = full_box(b'infe', 2, struct.pack('>HH', 1, 0) + b'mime' + b'\x00')
        with self.assertRaises(HeifError) as ctx:
            heif_reader.extract_exif(heif_with_items(infe, 0xFFFFFFFF))
        self.assertIn('no Exif item', str(ctx.exception))


def heif_with_items(infe_boxes, count):
    """HEIF whose iinf declares count items but only holds infe_boxes"""
    ftyp = box(b'ftyp', b'heic' + struct.pack('>I', 0) + b'mif1heic')
    iinf = full_box(b'iinf', 1, struct.pack('>I', count) + infe_boxes)
    iloc = full_box(b'iloc', 0, bytes([0x44, 0x00]) + struct.pack('>H', 0))
    return ftyp + full_box(b'meta', 0, iinf + iloc)


class TestFindTiffHeader(unittest.TestCase):

    def test_finds_first_valid_header(self):
        tiff = sample_tiff()
        data = b'junk MM but not a header ' + tiff
        self.assertEqual(container_detector.find_tiff_header(data), 25)

    def test_no_header(self):
        with self.assertRaises(ExifHeaderError):
            container_detector.find_tiff_header(b'no tiff here at all')


if __name__ == "__main__":
    unittest.main()
