#!/usr/bin/env python3
"""
Tests for the EXIF decoder; synthetic TIFF, JPEG and HEIF inputs come from tests.tiff_builder
"""

import os
import sys

# Root modules are not a package, so put the project root on the path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
