#!/usr/bin/env python3
"""
Apple Maker Note Extractor
Decodes the iOS maker-note directory written by iPhone and iPad cameras
"""

from typing import Dict
import logging

from .base_extractor import CameraExtractor

logger = logging.getLogger('apple_extractor')

APPLE_SIGNATURE = b'Apple iOS\x00\x00\x01'

# The directory follows the signature and a two-byte byte-order marker
APPLE_DIRECTORY_OFFSET = 14

APPLE_FIELDS = {
    0x0001: 'Apple.MakerNoteVersion',
    0x0002: 'Apple.AEMatrix',  # plist
    0x0003: 'Apple.RunTime',  # plist
    0x0004: 'Apple.AEStable',
    0x0005: 'Apple.AETarget',
    0x0006: 'Apple.AEAverage',
    0x0007: 'Apple.AFStable',
    0x0008: 'Apple.AccelerationVector',
    0x0009: 'Apple.SISMethod',
    0x000a: 'Apple.HDRImageType',  # 3 = HDR, 4 = original
    0x000b: 'Apple.BurstUUID',
    0x000c: 'Apple.FocusDistanceRange',
    0x000d: 'Apple.SphereHealthAverageCurrent',
    0x000e: 'Apple.Orientation',
    0x000f: 'Apple.OISMode',
    0x0010: 'Apple.SphereStatus',
    0x0011: 'Apple.ContentIdentifier',
    0x0012: 'Apple.QRMOutputType',
    0x0013: 'Apple.SphereExternalForceOffset',
    0x0014: 'Apple.ImageCaptureType',  # 1 ProRAW, 2 portrait, 10 photo
    0x0015: 'Apple.ImageUniqueID',
    0x0016: 'Apple.PhotosOriginatingSignature',
    0x0017: 'Apple.LivePhotoVideoIndex',
    0x0018: 'Apple.PhotosRenderOriginatingSignature',
    0x0019: 'Apple.ImageProcessingFlags',
    0x001a: 'Apple.QualityHint',
    0x001b: 'Apple.PhotosRenderEffect',
    0x001c: 'Apple.BracketedCaptureSequenceNumber',
    0x001d: 'Apple.LuminanceNoiseAmplitude',
    0x001e: 'Apple.OriginatingAppID',
    0x001f: 'Apple.PhotosAppFeatureFlags',
    0x0020: 'Apple.ImageCaptureRequestID',
    0x0021: 'Apple.HDRHeadroom',
    0x0023: 'Apple.AFPerformance',
    0x0025: 'Apple.SceneFlags',
    0x0026: 'Apple.SignalToNoiseRatioType',
    0x0027: 'Apple.SignalToNoiseRatio',
    0x002b: 'Apple.PhotoIdentifier',
    0x002d: 'Apple.ColorTemperature',
    0x002e: 'Apple.CameraType',
    0x002f: 'Apple.FocusPosition',
    0x0030: 'Apple.HDRGain',
    0x0038: 'Apple.AFMeasuredDepth',
    0x003d: 'Apple.AFConfidence',
    0x003e: 'Apple.ColorCorrectionMatrix',
    0x003f: 'Apple.GreenGhostMitigationStatus',
    0x0040: 'Apple.SemanticStyle',
    0x0041: 'Apple.SemanticStyleRenderingVer',
    0x0042: 'Apple.SemanticStylePreset',
    0x004e: 'Apple.Apple_0x004e',  # plist
    0x004f: 'Apple.Apple_0x004f',  # plist
}


class AppleExtractor(CameraExtractor):
    """Extractor for Apple iOS maker notes"""

    name = 'Apple'

    def can_handle(self, exif) -> bool:
        note = self.maker_note(exif)
        return note is not None and note.val[:len(APPLE_SIGNATURE)] == APPLE_SIGNATURE

    def get_makernote_tags(self) -> Dict[int, str]:
        return APPLE_FIELDS

    def parse(self, exif) -> None:
        if not self.can_handle(exif):
            return
        # Offsets inside the note are relative to the start of the note
        note = exif.get('MakerNote')
        directory = self.decode_directory(note.val, APPLE_DIRECTORY_OFFSET, exif.tiff.order)
        exif.load_tags(directory, self.get_makernote_tags(), False)
        logger.debug("Merged %d Apple maker-note tags", len(directory))
