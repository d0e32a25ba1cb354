"""Color science for WCAG contrast checking and accessible palettes.

Everything here is pure and deterministic (random base colors take an
injectable generator). Malformed hex input degrades to black instead of
raising; validate upstream with is_valid_hex() when strict parsing matters.
"""

import random
import re
from typing import NamedTuple

from ..models import ColorCombination, ContrastCheck, ContrastLevel

HEX_PATTERN = re.compile(r"#?([a-f\d]{2})([a-f\d]{2})([a-f\d]{2})", re.IGNORECASE)

WHITE = "#ffffff"
BLACK = "#000000"

# Minimum ratio a palette entry must reach with its text color
PALETTE_MIN_RATIO = 4.5

# (name, hue offset in degrees) in generation order
HUE_OFFSETS = [
    ("Base", 0),
    ("Complementary", 180),
    ("Analogous 1", 30),
    ("Analogous 2", -30),
    ("Triadic 1", 120),
    ("Triadic 2", 240),
    ("Split Comp 1", 150),
    ("Split Comp 2", 210),
]

# (suffix, saturation %, lightness %) applied to every hue
VARIANTS = [
    ("Dark", 90, 20),
    ("Deep", 80, 40),
    ("Medium", 70, 60),
    ("Light", 60, 80),
]


class RGB(NamedTuple):
    r: int
    g: int
    b: int


class HSL(NamedTuple):
    h: float  # [0, 360)
    s: float  # [0, 100]
    l: float  # [0, 100]


def is_valid_hex(value: str) -> bool:
    """Check for a 6-digit hex color, optionally '#'-prefixed."""
    return HEX_PATTERN.fullmatch(value or "") is not None


def hex_to_rgb(value: str) -> RGB:
    """Convert a hex color to RGB; malformed input yields black."""
    match = HEX_PATTERN.fullmatch(value or "")
    if not match:
        return RGB(0, 0, 0)
    return RGB(*(int(part, 16) for part in match.groups()))


def rgb_to_hex(r: int, g: int, b: int) -> str:
    """Convert channel values to a lowercase '#rrggbb' string."""
    return "#" + "".join(f"{max(0, min(255, int(c))):02x}" for c in (r, g, b))


def rgb_to_hsl(r: int, g: int, b: int) -> HSL:
    """Convert RGB channels (0-255) to hue degrees and percentages."""
    r, g, b = r / 255, g / 255, b / 255

    high = max(r, g, b)
    low = min(r, g, b)
    h = 0.0
    s = 0.0
    l = (high + low) / 2

    if high != low:
        d = high - low
        s = d / (2 - high - low) if l > 0.5 else d / (high + low)

        if high == r:
            h = (g - b) / d + (6 if g < b else 0)
        elif high == g:
            h = (b - r) / d + 2
        else:
            h = (r - g) / d + 4
        h /= 6

    return HSL(h * 360 % 360, s * 100, l * 100)


def _hue_to_channel(p: float, q: float, t: float) -> float:
    if t < 0:
        t += 1
    if t > 1:
        t -= 1
    if t < 1 / 6:
        return p + (q - p) * 6 * t
    if t < 1 / 2:
        return q
    if t < 2 / 3:
        return p + (q - p) * (2 / 3 - t) * 6
    return p


def hsl_to_rgb(h: float, s: float, l: float) -> RGB:
    """Convert hue degrees and saturation/lightness percentages to RGB."""
    h = (h % 360) / 360
    s /= 100
    l /= 100

    if s == 0:
        r = g = b = l
    else:
        q = l * (1 + s) if l < 0.5 else l + s - l * s
        p = 2 * l - q
        r = _hue_to_channel(p, q, h + 1 / 3)
        g = _hue_to_channel(p, q, h)
        b = _hue_to_channel(p, q, h - 1 / 3)

    return RGB(round(r * 255), round(g * 255), round(b * 255))


def _linearize(channel: int) -> float:
    value = channel / 255
    if value <= 0.03928:
        return value / 12.92
    return ((value + 0.055) / 1.055) ** 2.4


def relative_luminance(r: int, g: int, b: int) -> float:
    """WCAG relative luminance of an sRGB color, in [0, 1]."""
    return _linearize(r) * 0.2126 + _linearize(g) * 0.7152 + _linearize(b) * 0.0722


def contrast_ratio(l1: float, l2: float) -> float:
    """Contrast ratio of two luminances; symmetric and always >= 1."""
    lighter = max(l1, l2)
    darker = min(l1, l2)
    return (lighter + 0.05) / (darker + 0.05)


def hex_contrast_ratio(foreground: str, background: str) -> float:
    """Contrast ratio between two hex colors."""
    return contrast_ratio(
        relative_luminance(*hex_to_rgb(foreground)),
        relative_luminance(*hex_to_rgb(background)),
    )


def classify_level(ratio: float, large_text: bool = False) -> ContrastLevel:
    """Classify a contrast ratio; thresholds are inclusive."""
    if large_text:
        if ratio >= 4.5:
            return ContrastLevel.AAA
        if ratio >= 3:
            return ContrastLevel.AA
        return ContrastLevel.FAIL
    if ratio >= 7:
        return ContrastLevel.AAA
    if ratio >= 4.5:
        return ContrastLevel.AA
    return ContrastLevel.FAIL


def check_contrast(foreground: str, background: str) -> ContrastCheck:
    """Full AA/AAA pass matrix for a text/background pair."""
    ratio = hex_contrast_ratio(foreground, background)
    return ContrastCheck(
        foreground=foreground,
        background=background,
        contrast_ratio=ratio,
        passes_aa_normal=ratio >= 4.5,
        passes_aa_large=ratio >= 3,
        passes_aaa_normal=ratio >= 7,
        passes_aaa_large=ratio >= 4.5,
    )


def generate_random_color(rng: random.Random | None = None) -> str:
    """Random vivid base color: any hue, 60-100% saturation, 30-70% lightness.

    The result is not guaranteed to be accessible; run
    generate_accessible_palette() on it afterwards.
    """
    rng = rng or random.Random()
    h = rng.uniform(0, 360)
    s = 60 + rng.random() * 40
    l = 30 + rng.random() * 40
    return rgb_to_hex(*hsl_to_rgb(h, s, l))


def generate_accessible_palette(base_color: str) -> list[ColorCombination]:
    """Derive backgrounds from a base color and keep those with legible text.

    Eight related hues times four saturation/lightness presets give 32
    candidates. Each keeps whichever of white or black text contrasts more,
    provided it reaches 4.5:1. Results are sorted by descending ratio;
    equal ratios stay in generation order.
    """
    base = rgb_to_hsl(*hex_to_rgb(base_color))
    white_luminance, black_luminance = 1.0, 0.0

    combinations = []
    for hue_name, offset in HUE_OFFSETS:
        hue = (base.h + offset) % 360
        for suffix, saturation, lightness in VARIANTS:
            rgb = hsl_to_rgb(hue, saturation, lightness)
            luminance = relative_luminance(*rgb)

            white_contrast = contrast_ratio(luminance, white_luminance)
            black_contrast = contrast_ratio(luminance, black_luminance)
            ratio = max(white_contrast, black_contrast)
            if ratio < PALETTE_MIN_RATIO:
                continue

            combinations.append(ColorCombination(
                background=rgb_to_hex(*rgb),
                text=WHITE if white_contrast > black_contrast else BLACK,
                name=f"{hue_name} {suffix}",
                ratio=ratio,
                wcag_level=classify_level(ratio),
            ))

    return sorted(combinations, key=lambda c: c.ratio, reverse=True)
