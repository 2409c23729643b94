#!/usr/bin/env python3
"""
Nikon Maker Note Extractor
Decodes type 3 Nikon maker notes, which embed a complete TIFF structure
"""

from typing import Dict
import logging

import exif_fields
import tiff_codec
from exif_errors import MakerNoteError, TiffDecodeError
from .base_extractor import CameraExtractor

logger = logging.getLogger('nikon_extractor')

NIKON_SIGNATURE = b'Nikon\x00'

# Signature, two version bytes and two reserved bytes precede the TIFF header
NIKON_TIFF_OFFSET = 10

NIKON_FIELDS = {
    0x0001: 'Nikon.MakerNoteVersion',
    0x0002: 'Nikon.ISOSpeed',
    0x0003: 'Nikon.ColorMode',
    0x0004: 'Nikon.Quality',
    0x0005: 'Nikon.WhiteBalance',
    0x0006: 'Nikon.Sharpening',
    0x0007: 'Nikon.Focus',
    0x0008: 'Nikon.FlashSetting',
    0x0009: 'Nikon.FlashDevice',
    0x000b: 'Nikon.WhiteBalanceBias',
    0x000c: 'Nikon.WB_RBLevels',
    0x000d: 'Nikon.ProgramShift',
    0x000e: 'Nikon.ExposureDiff',
    0x000f: 'Nikon.ISOSelection',
    0x0010: 'Nikon.DataDump',
    0x0011: 'Nikon.Preview',
    0x0012: 'Nikon.FlashComp',
    0x0013: 'Nikon.ISOSettings',
    0x0016: 'Nikon.ImageBoundary',
    0x0017: 'Nikon.ExternalFlashExposureComp',
    0x0018: 'Nikon.FlashBracketComp',
    0x0019: 'Nikon.ExposureBracketComp',
    0x001a: 'Nikon.ImageProcessing',
    0x001b: 'Nikon.CropHiSpeed',
    0x001c: 'Nikon.ExposureTuning',
    0x001d: 'Nikon.SerialNumber',
    0x001e: 'Nikon.ColorSpace',
    0x001f: 'Nikon.VRInfo',
    0x0020: 'Nikon.ImageAuthentication',
    0x0022: 'Nikon.ActiveDLighting',
    0x0023: 'Nikon.PictureControl',
    0x0024: 'Nikon.WorldTime',
    0x0025: 'Nikon.ISOInfo',
    0x002a: 'Nikon.VignetteControl',
    0x002b: 'Nikon.DistortInfo',
    0x0080: 'Nikon.ImageAdjustment',
    0x0081: 'Nikon.ToneComp',
    0x0082: 'Nikon.AuxiliaryLens',
    0x0083: 'Nikon.LensType',
    0x0084: 'Nikon.Lens',
    0x0085: 'Nikon.FocusDistance',
    0x0086: 'Nikon.DigitalZoom',
    0x0087: 'Nikon.FlashMode',
    0x0088: 'Nikon.AFInfo',
    0x0089: 'Nikon.ShootingMode',
    0x008b: 'Nikon.LensFStops',
    0x008c: 'Nikon.ContrastCurve',
    0x008d: 'Nikon.ColorHue',
    0x008f: 'Nikon.SceneMode',
    0x0090: 'Nikon.LightSource',
    0x0091: 'Nikon.ShotInfo',
    0x0092: 'Nikon.HueAdjustment',
    0x0093: 'Nikon.NEFCompression',
    0x0094: 'Nikon.Saturation',
    0x0095: 'Nikon.NoiseReduction',
    0x0097: 'Nikon.ColorBalance',
    0x0098: 'Nikon.LensData',
    0x0099: 'Nikon.RawImageCenter',
    0x009a: 'Nikon.SensorPixelSize',
    0x009c: 'Nikon.SceneAssist',
    0x009e: 'Nikon.RetouchHistory',
    0x00a0: 'Nikon.SerialNumber2',
    0x00a2: 'Nikon.ImageDataSize',
    0x00a5: 'Nikon.ImageCount',
    0x00a6: 'Nikon.DeletedImageCount',
    0x00a7: 'Nikon.ShutterCount',
    0x00a8: 'Nikon.FlashInfo',
    0x00a9: 'Nikon.ImageOptimization',
    0x00aa: 'Nikon.Saturation2',
    0x00ab: 'Nikon.VariProgram',
    0x00ac: 'Nikon.ImageStabilization',
    0x00ad: 'Nikon.AFResponse',
    0x00b0: 'Nikon.MultiExposure',
    0x00b1: 'Nikon.HighISONoiseReduction',
    0x00b3: 'Nikon.ToningEffect',
    0x00b6: 'Nikon.PowerUpTime',
    0x00b7: 'Nikon.AFInfo2',
    0x00b8: 'Nikon.FileInfo',
    0x00b9: 'Nikon.AFTune',
    0x00bb: 'Nikon.RetouchInfo',
    0x00bd: 'Nikon.PictureControlData',
    0x0e00: 'Nikon.PrintIM',
    0x0e01: 'Nikon.CaptureData',
    0x0e09: 'Nikon.CaptureVersion',
    0x0e0e: 'Nikon.CaptureOffsets',
    0x0e10: 'Nikon.ScanIFD',
    0x0e1d: 'Nikon.ICCProfile',
    0x0e1e: 'Nikon.CaptureOutput',
    0x0e22: 'Nikon.NEFBitDepth',
}


class NikonExtractor(CameraExtractor):
    """Extractor for type 3 Nikon maker notes (all DSLR and Z bodies)"""

    name = 'Nikon'

    def can_handle(self, exif) -> bool:
        note = self.maker_note(exif)
        return note is not None and note.val.startswith(NIKON_SIGNATURE)

    def get_makernote_tags(self) -> Dict[int, str]:
        return NIKON_FIELDS

    def parse(self, exif) -> None:
        if not self.can_handle(exif):
            return
        note = exif.get(exif_fields.MAKER_NOTE)
        try:
            embedded = tiff_codec.decode(note.val[NIKON_TIFF_OFFSET:])
        except TiffDecodeError as e:
            raise MakerNoteError(self.name, f"embedded TIFF decode failed ({e.message})") from e
        if not embedded.dirs:
            raise MakerNoteError(self.name, "embedded TIFF has no directories")
        exif.load_tags(embedded.dirs[0], self.get_makernote_tags(), False)
        logger.debug("Merged %d Nikon maker-note tags", len(embedded.dirs[0]))
