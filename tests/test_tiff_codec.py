#!/usr/bin/env python3
"""
Tests for the TIFF codec: tags, directories and directory chains
"""

import os
import struct
import sys
import unittest
from fractions import Fraction

# Add parent directory to path to allow imports
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import tiff_codec
from tiff_codec import DataType, Format, Tag
from exif_errors import ShortReadTagValueError, TagValueError, TiffDecodeError
from tests.tiff_builder import TiffBuilder, layout_ifd


class TestTag(unittest.TestCase):
    """Typed access to tag values"""

    def test_value_length_must_match_count(self):
        with self.assertRaises(TiffDecodeError):
            Tag(0x0100, DataType.SHORT, 2, b'\x01\x00')

    def test_invalid_type(self):
        with self.assertRaises(TiffDecodeError):
            Tag(0x0100, 14, 1, b'\x00')

    def test_int_values(self):
        tag = Tag(0x0100, DataType.SHORT, 2, struct.pack('>HH', 640, 480), tiff_codec.BIG_ENDIAN)
        self.assertIs(tag.format, Format.INT)
        self.assertEqual(tag.int_val(0), 640)
        self.assertEqual(tag.int_val(1), 480)
        with self.assertRaises(TagValueError):
            tag.int_val(2)
        with self.assertRaises(TagValueError):
            tag.rat2(0)

    def test_signed_values(self):
        tag = Tag(0x0001, DataType.SSHORT, 1, struct.pack('<h', -5))
        self.assertEqual(tag.int_val(), -5)

    def test_rationals(self):
        tag = Tag(0x829A, DataType.RATIONAL, 2, struct.pack('<IIII', 1, 250, 7, 0))
        self.assertEqual(tag.rat2(0), (1, 250))
        self.assertEqual(tag.rat(0), Fraction(1, 250))
        self.assertAlmostEqual(tag.rat_float(0), 0.004)
        # zero denominator
        self.assertEqual(tag.rat_float(1), 7.0)
        with self.assertRaises(TagValueError):
            tag.rat(1)

    def test_string(self):
        tag = Tag(0x010F, DataType.ASCII, 6, b'Canon\x00')
        self.assertIs(tag.format, Format.STRING)
        self.assertEqual(tag.string_val(), 'Canon')
        self.assertEqual(str(tag), '"Canon"')
        with self.assertRaises(TagValueError):
            tag.int_val()

    def test_undefined_is_not_a_string(self):
        tag = Tag(0x9000, DataType.UNDEFINED, 4, b'0231')
        self.assertIs(tag.format, Format.UNDEF)
        with self.assertRaises(TagValueError):
            tag.string_val()

    def test_str_renders_json(self):
        self.assertEqual(str(Tag(0x0112, DataType.SHORT, 1, b'\x06\x00')), '6')
        rat = Tag(0x829D, DataType.RATIONAL, 1, struct.pack('<II', 28, 10))
        self.assertEqual(str(rat), '"28/10"')
        pair = Tag(0x0100, DataType.SHORT, 2, struct.pack('<HH', 1, 2))
        self.assertEqual(str(pair), '[1, 2]')

    def test_float(self):
        tag = Tag(0x0001, DataType.DOUBLE, 1, struct.pack('<d', 1.5))
        self.assertIs(tag.format, Format.FLOAT)
        self.assertEqual(tag.float_val(), 1.5)

    def test_equality(self):
        a = Tag(0x0112, DataType.SHORT, 1, b'\x01\x00')
        b = Tag(0x0112, DataType.SHORT, 1, b'\x01\x00')
        c = Tag(0x0112, DataType.SHORT, 1, b'\x02\x00')
        self.assertEqual(a, b)
        self.assertNotEqual(a, c)
        self.assertEqual(hash(a), hash(b))


class TestDecode(unittest.TestCase):
    """Header and directory decoding"""

    def test_both_byte_orders(self):
        for order in ('<', '>'):
            with self.subTest(order=order):
                builder = TiffBuilder(order)
                ifd0 = builder.add_ifd([(0x010F, DataType.ASCII, 'Make'),
                                        (0x0100, DataType.LONG, 4000)])
                tiff = tiff_codec.decode(builder.build(ifd0))
                self.assertEqual(tiff.order, order)
                self.assertEqual(len(tiff.dirs), 1)
                tags = {t.id: t for t in tiff.dirs[0]}
                self.assertEqual(tags[0x010F].string_val(), 'Make')
                self.assertEqual(tags[0x0100].int_val(), 4000)

    def test_out_of_line_value_offset(self):
        builder = TiffBuilder()
        ifd0 = builder.add_ifd([(0x010F, DataType.ASCII, 'NIKON CORPORATION')])
        data = builder.build(ifd0)
        tag = tiff_codec.decode(data).dirs[0].tags[0]
        self.assertGreater(tag.val_offset, 0)
        self.assertEqual(data[tag.val_offset:tag.val_offset + tag.count], tag.val)

    def test_inline_value_has_no_offset(self):
        builder = TiffBuilder()
        ifd0 = builder.add_ifd([(0x0112, DataType.SHORT, 1)])
        tag = tiff_codec.decode(builder.build(ifd0)).dirs[0].tags[0]
        self.assertEqual(tag.val_offset, 0)

    def test_zero_count_tag(self):
        builder = TiffBuilder()
        ifd0 = builder.add_ifd([(0x9286, DataType.UNDEFINED, b'')])
        tag = tiff_codec.decode(builder.build(ifd0)).dirs[0].tags[0]
        self.assertEqual(tag.count, 0)
        self.assertEqual(tag.val, b'')

    def test_directory_chain(self):
        builder = TiffBuilder()
        ifd1 = builder.add_ifd([(0x0103, DataType.SHORT, 6)])
        ifd0 = builder.add_ifd([(0x0112, DataType.SHORT, 1)], next_offset=ifd1)
        tiff = tiff_codec.decode(builder.build(ifd0))
        self.assertEqual(len(tiff.dirs), 2)

    def test_recursive_ifd(self):
        data = bytearray(b'II*\x00' + struct.pack('<I', 8))
        # one entry, next pointer back to itself
        data += layout_ifd([(0x0112, DataType.SHORT, 1)], '<', 8, next_offset=8)
        with self.assertRaises(TiffDecodeError) as ctx:
            tiff_codec.decode(bytes(data))
        self.assertIn('recursive IFD', str(ctx.exception))

    def test_bad_header(self):
        for data in (b'II*', b'XX*\x00\x08\x00\x00\x00', b'II+\x00\x08\x00\x00\x00'):
            with self.subTest(data=data):
                with self.assertRaises(TiffDecodeError):
                    tiff_codec.decode(data)

    def test_offset_past_end(self):
        data = b'II*\x00' + struct.pack('<I', 100)
        with self.assertRaises(TiffDecodeError):
            tiff_codec.decode(data)

    def test_truncated_directory(self):
        data = b'II*\x00' + struct.pack('<I', 8) + struct.pack('<H', 5) + b'\x00' * 12
        with self.assertRaises(TiffDecodeError):
            tiff_codec.decode(data)

    def test_short_read_of_value(self):
        entry = struct.pack('<HHII', 0x010F, DataType.ASCII, 40, 26)
        data = b'II*\x00' + struct.pack('<I', 8) + struct.pack('<H', 1) + entry + struct.pack('<I', 0)
        with self.assertRaises(ShortReadTagValueError):
            tiff_codec.decode(data)

    def test_invalid_count(self):
        entry = struct.pack('<HHII', 0x010F, DataType.BYTE, 0xFFFFFFFF, 0)
        data = b'II*\x00' + struct.pack('<I', 8) + struct.pack('<H', 1) + entry + struct.pack('<I', 0)
        with self.assertRaises(TiffDecodeError):
            tiff_codec.decode(data)

    def test_is_tiff_header(self):
        self.assertTrue(tiff_codec.is_tiff_header(b'MM\x00*\x00\x00\x00\x08'))
        self.assertFalse(tiff_codec.is_tiff_header(b'MM\x00+\x00\x00\x00\x08'))
        self.assertFalse(tiff_codec.is_tiff_header(b'MM\x00*'))


if __name__ == "__main__":
    unittest.main()
