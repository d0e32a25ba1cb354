"""Core accessibility logic: color science, rule knowledge, legislation mapping."""

from .color import (
    check_contrast,
    classify_level,
    contrast_ratio,
    generate_accessible_palette,
    generate_random_color,
    hex_to_rgb,
    hsl_to_rgb,
    relative_luminance,
    rgb_to_hex,
    rgb_to_hsl,
)
from .knowledge import lookup
from .legislation import Jurisdiction, add_legislation_refs, jurisdictions_for_region

__all__ = [
    # Color
    "check_contrast",
    "classify_level",
    "contrast_ratio",
    "generate_accessible_palette",
    "generate_random_color",
    "hex_to_rgb",
    "hsl_to_rgb",
    "relative_luminance",
    "rgb_to_hex",
    "rgb_to_hsl",
    # Knowledge
    "lookup",
    # Legislation
    "Jurisdiction",
    "add_legislation_refs",
    "jurisdictions_for_region",
]
