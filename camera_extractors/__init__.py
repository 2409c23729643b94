#!/usr/bin/env python3
"""
Camera Extractors Package
Maker-note extractors for Apple, Canon, Nikon, Sony and Adobe DNG files
"""

from .base_extractor import CameraExtractor
from .apple_extractor import AppleExtractor
from .canon_extractor import CanonExtractor, CanonRaw, canon_raw_info
from .nikon_extractor import NikonExtractor
from .dng_extractor import DngExtractor
from .sony_extractor import SonyExtractor, descramble
from .extractor_factory import ParserRegistry, create_default_registry, get_default_registry

# Export public API
__all__ = [
    'CameraExtractor',
    'AppleExtractor',
    'CanonExtractor',
    'CanonRaw',
    'canon_raw_info',
    'NikonExtractor',
    'DngExtractor',
    'SonyExtractor',
    'descramble',
    'ParserRegistry',
    'create_default_registry',
    'get_default_registry',
]
