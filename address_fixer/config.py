"""Centralised configuration for the PDF Address Fixer backend."""

from __future__ import annotations

import os
from pathlib import Path

# -- Storage --
UPLOAD_DIR = Path(os.getenv("ADDRESS_FIXER_UPLOAD_DIR", "uploads"))
PREFERENCES_DIR = Path(os.getenv("ADDRESS_FIXER_PREFERENCES_DIR", "preferences"))
STORAGE_KEY = "pdf-fixer-config"  # single saved-config record
FRONTEND_DIR = Path("frontend")

# -- Upload limits --
MAX_UPLOAD_SIZE = 50 * 1024 * 1024  # 50 MB

# -- Sessions --
MAX_SESSIONS = 64  # in-memory interactive sessions kept at once

# -- Rendering --
DEFAULT_RENDER_SCALE = 2.0  # PNG render resolution multiplier

# -- Download naming --
OUTPUT_PREFIX = "updated_"

# -- Manual selection --
MIN_DRAG_PIXELS = 5  # display px, checked before unscaling
MANUAL_SELECTION_TEXT = "Manual Selection"

# -- Cover rectangle (page units) --
COVER_INSET = 2  # moved left and down
COVER_EXTRA_WIDTH = 4
COVER_EXTRA_HEIGHT = 5
COVER_COLOR: tuple[float, float, float] = (1.0, 1.0, 1.0)

# -- Replacement text --
REPLACEMENT_FONT = "helv"  # Base14 Helvetica
TEXT_COLOR: tuple[float, float, float] = (0.0, 0.0, 0.0)
DEFAULT_FONT_SIZE = 12.0
BLOCK_HEIGHT_THRESHOLD = 24  # boxes taller than this are freeform blocks
MIN_LINE_FONT_SIZE = 5  # line boxes at or below this fall back to the default
LINE_SPACING = 1.2  # line height = font size * this
BASELINE_CENTER_DIVISOR = 4  # baseline-to-visual-centre correction: size / this

# -- Text normalisation --
DASH_CHARS = "\u2010\u2011\u2012\u2013\u2014\u2015"
