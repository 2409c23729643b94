#!/usr/bin/env python3
"""
Camera Extractor Factory
Ordered registry of the extractors run by the decoder
"""

import logging
import threading
from typing import Optional, Tuple

from .base_extractor import CameraExtractor

logger = logging.getLogger('extractor_factory')


class ParserRegistry:
    """Append-only, ordered list of extractors.

    Registration must be finished before the registry is shared between
    threads; ``freeze`` makes any later registration an error.
    """

    def __init__(self, *extractors: CameraExtractor):
        self._extractors = []
        self._frozen = False
        self.register(*extractors)

    def register(self, *extractors: CameraExtractor) -> None:
        """Append extractors; they run after everything already registered

        Args:
            extractors: Instances implementing CameraExtractor
        """
        if self._frozen:
            raise RuntimeError("extractor registry is frozen")
        for extractor in extractors:
            if not isinstance(extractor, CameraExtractor):
                raise TypeError(f"{extractor!r} is not a CameraExtractor")
            self._extractors.append(extractor)
            logger.debug("Registered extractor %s", extractor.name)

    def freeze(self) -> 'ParserRegistry':
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def snapshot(self) -> Tuple[CameraExtractor, ...]:
        return tuple(self._extractors)

    def __len__(self) -> int:
        return len(self._extractors)

    def __iter__(self):
        return iter(self.snapshot())


def create_default_registry() -> ParserRegistry:
    """Build a registry holding the standard EXIF parser followed by every built-in extractor.

    The result is not frozen, so callers can append their own extractors.
    """
    from exif_extractor import ExifExtractor
    from .apple_extractor import AppleExtractor
    from .canon_extractor import CanonExtractor
    from .nikon_extractor import NikonExtractor
    from .dng_extractor import DngExtractor
    from .sony_extractor import SonyExtractor

    return ParserRegistry(
        ExifExtractor(),
        AppleExtractor(),
        CanonExtractor(),
        NikonExtractor(),
        DngExtractor(),
        SonyExtractor(),
    )


_default_registry: Optional[ParserRegistry] = None
_default_lock = threading.Lock()


def get_default_registry() -> ParserRegistry:
    """Frozen process-wide registry, built on first use"""
    global _default_registry
    with _default_lock:
        if _default_registry is None:
            _default_registry = create_default_registry().freeze()
    return _default_registry
