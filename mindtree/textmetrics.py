"""Label measurement backed by cairo's toy text API."""

import re
from functools import lru_cache
from typing import Tuple

import cairo

_FONT_RE = re.compile(
    r"^\s*(?P<weight>bold\s+)?(?P<size>\d+(?:\.\d+)?)px\s+(?P<family>.+?)\s*$",
    re.IGNORECASE,
)

DEFAULT_FAMILY = "sans-serif"
DEFAULT_SIZE = 12.0
CACHE_SIZE = 2048


def parse_font(font: str) -> Tuple[str, float, bool]:
    """Split a CSS-like font string ("bold 14px Serif, sans-serif").

    Returns (family, size, bold). Only the first family in a fallback list
    is used; unparseable strings give the default 12px sans-serif.
    """
    match = _FONT_RE.match(font or "")
    if not match:
        return DEFAULT_FAMILY, DEFAULT_SIZE, False
    family = match.group("family").split(",")[0].strip().strip("'\"")
    return family or DEFAULT_FAMILY, float(match.group("size")), bool(match.group("weight"))


class CairoTextMeasurer:
    """Callable `measure(text, font) -> width in pixels`."""

    def __init__(self, cache_size: int = CACHE_SIZE):
        # A 1x1 surface is enough; only extents are needed
        self._surface = cairo.ImageSurface(cairo.FORMAT_ARGB32, 1, 1)
        self._cr = cairo.Context(self._surface)
        self._cached = lru_cache(maxsize=cache_size)(self._measure)

    def __call__(self, text: str, font: str) -> float:
        return self._cached(text, font)

    def cache_info(self):
        return self._cached.cache_info()

    def _measure(self, text: str, font: str) -> float:
        if not text:
            return 0.0
        family, size, bold = parse_font(font)
        self._cr.select_font_face(
            family,
            cairo.FONT_SLANT_NORMAL,
            cairo.FONT_WEIGHT_BOLD if bold else cairo.FONT_WEIGHT_NORMAL,
        )
        self._cr.set_font_size(size)
        return self._cr.text_extents(text).x_advance
