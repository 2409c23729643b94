#!/usr/bin/env python3
"""
HEIF EXIF Reader
Walks the ISO-BMFF box structure of HEIF/HEIC files to the embedded Exif item
"""

import logging
from typing import Dict, List, Optional, Tuple

from exif_errors import HeifError

logger = logging.getLogger('heif_reader')


class HeifReader:
    """Locates the Exif item of a HEIF file held in memory.

    The Exif item is found through the ``meta`` box: ``iinf`` names the item,
    ``iloc`` gives its extent in the file.
    """

    def __init__(self, data: bytes):
        self.data = data

    def _uint(self, offset: int, size: int) -> int:
        if size == 0:
            return 0
        if offset < 0 or offset + size > len(self.data):
            raise HeifError(f"heif: read of {size} bytes at {offset} is past the end of data")
        return int.from_bytes(self.data[offset:offset + size], 'big')

    def parse_box_head(self, offset: int) -> Dict:
        """Box header: 4-byte length, 4-byte kind and an optional 64-bit length"""
        length = self._uint(offset, 4)
        kind = self.data[offset + 4:offset + 8].decode('latin-1')
        start = offset + 8
        if length == 1:
            length = self._uint(offset + 8, 8)
            start += 8
        elif length == 0:
            length = len(self.data) - offset
        if length < start - offset:
            raise HeifError(f"heif: invalid length {length} for box {kind!r} at {offset}")
        return {'offset': offset, 'length': length, 'kind': kind, 'start': start}

    def parse_box_full_head(self, box: Dict):
        """Full boxes carry 1 byte of version and 3 bytes of flags"""
        if 'version' in box:
            return
        box['version'] = self._uint(box['start'], 4) >> 24
        box['start'] += 4

    def parse_boxes(self, offset: int, end: int) -> List[Dict]:
        boxes = []
        while offset + 8 <= end:
            box = self.parse_box_head(offset)
            boxes.append(box)
            offset += box['length']
        return boxes

    def find_box(self, box: Dict, kind: str) -> Optional[Dict]:
        if 'boxes' not in box:
            box['boxes'] = self.parse_boxes(box['start'], box['offset'] + box['length'])
        return next((b for b in box['boxes'] if b['kind'] == kind), None)

    def find_meta(self) -> Dict:
        for box in self.parse_boxes(0, len(self.data)):
            if box['kind'] == 'meta':
                self.parse_box_full_head(box)
                return box
        raise HeifError("heif: no meta box")

    def find_exif_item_id(self, iinf: Dict) -> Optional[int]:
        self.parse_box_full_head(iinf)
        offset = iinf['start']
        count_size = 2 if iinf['version'] == 0 else 4
        count = self._uint(offset, count_size)
        offset += count_size
        end = iinf['offset'] + iinf['length']

        while count > 0 and offset + 8 <= end:
            infe = self.parse_box_head(offset)
            self.parse_box_full_head(infe)
            if infe['version'] >= 2:
                id_size = 4 if infe['version'] == 3 else 2
                name_offset = infe['start'] + id_size + 2
                if self.data[name_offset:name_offset + 4] == b'Exif':
                    return self._uint(infe['start'], id_size)
            offset += infe['length']
            count -= 1
        return None

    def find_extent(self, iloc: Dict, item_id: int) -> Optional[Tuple[int, int]]:
        self.parse_box_full_head(iloc)
        version = iloc['version']
        offset = iloc['start']

        sizes = self._uint(offset, 1)
        offset_size, length_size = sizes >> 4, sizes & 0x0F
        sizes = self._uint(offset + 1, 1)
        base_offset_size = sizes >> 4
        index_size = sizes & 0x0F if version in (1, 2) else 0
        offset += 2

        item_id_size = 4 if version == 2 else 2
        item_count = self._uint(offset, item_id_size)
        offset += item_id_size

        for _ in range(item_count):
            current_id = self._uint(offset, item_id_size)
            offset += item_id_size
            if version in (1, 2):
                offset += 2  # construction method
            offset += 2  # data reference index
            base_offset = self._uint(offset, base_offset_size)
            offset += base_offset_size
            extent_count = self._uint(offset, 2)
            offset += 2

            if current_id == item_id:
                if extent_count > 1:
                    logger.warning("Exif item has %d extents, only the first is read", extent_count)
                extent_offset = self._uint(offset + index_size, offset_size)
                extent_length = self._uint(offset + index_size + offset_size, length_size)
                return base_offset + extent_offset, extent_length

            offset += extent_count * (index_size + offset_size + length_size)
        return None

    def exif_block(self) -> bytes:
        """The Exif item contents with its TIFF-header offset prefix removed"""
        meta = self.find_meta()
        iinf = self.find_box(meta, 'iinf')
        iloc = self.find_box(meta, 'iloc')
        if iinf is None or iloc is None:
            raise HeifError("heif: meta box has no iinf or iloc")

        item_id = self.find_exif_item_id(iinf)
        if item_id is None:
            raise HeifError("heif: no Exif item")
        extent = self.find_extent(iloc, item_id)
        if extent is None:
            raise HeifError(f"heif: no location for Exif item {item_id}")

        start, length = extent
        if start + length > len(self.data):
            raise HeifError("heif: Exif item extends past the end of data")
        shift = 4 + self._uint(start, 4)
        if shift > length:
            raise HeifError("heif: Exif item header offset is larger than the item")
        return self.data[start + shift:start + length]


def extract_exif(data: bytes) -> bytes:
    """Return the EXIF block embedded in HEIF data"""
    return HeifReader(data).exif_block()
