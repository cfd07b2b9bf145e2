"""
Module: core.models.settings

Purpose:
    Immutable render settings snapshot taken when a job is submitted.
    All measurements are in design units (A4 at 72 DPI, 595 x 842) and
    are scaled to raster pixels by the layout engine.

Key Classes:
    - Settings: Complete render settings snapshot
    - Margins: Page margins in design units
    - Randomization: Jitter and mistake parameters
    - PaperPattern / PaperColor: Paper enums

Dependencies:
    - dataclasses (std)
    - enum (std)

Used By:
    - core.schemas.validator: Builds Settings from request payloads
    - renderer.layout.engine: Reads settings while laying out a page
    - pipeline.service: Snapshots settings at submission
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Optional

# A4 at 72 DPI, the coordinate space settings are expressed in
DESIGN_WIDTH = 595
DESIGN_HEIGHT = 842

SUPPORTED_FONTS = (
    "Caveat",
    "Indie Flower",
    "Patrick Hand",
    "Shadows Into Light",
    "Homemade Apple",
    "Gloria Hallelujah",
    "Kalam",
    "Handlee",
    "Architects Daughter",
    "Nothing You Could Do",
)

MAX_FONT_SIZE = 200.0
MAX_LINE_SPACING = 10.0
MAX_SEED = 2**63

HEX_COLOR_RE = re.compile(r"^#[0-9a-fA-F]{6}$")


class PaperPattern(str, Enum):
    """Ruling drawn on the page background."""
    PLAIN = "plain"
    LINED = "lined"
    GRID = "grid"


class PaperColor(str, Enum):
    """Paper tint."""
    WHITE = "white"
    WARM = "warm"
    VINTAGE = "vintage"


@dataclass(frozen=True)
class Margins:
    """
    Page margins in design units (immutable).

    Attributes:
        top: Top margin
        right: Right margin
        bottom: Bottom margin
        left: Left margin
    """
    top: float = 50
    right: float = 40
    bottom: float = 50
    left: float = 60

    def __post_init__(self) -> None:
        """Validate margins on construction."""
        for name in ("top", "right", "bottom", "left"):
            value = getattr(self, name)
            if value < 0:
                raise ValueError(f"margin {name} must be non-negative: {value}")
        if self.left + self.right >= DESIGN_WIDTH:
            raise ValueError("Horizontal margins exceed page width")
        if self.top + self.bottom >= DESIGN_HEIGHT:
            raise ValueError("Vertical margins exceed page height")


@dataclass(frozen=True)
class Randomization:
    """
    Humanizing perturbation parameters (immutable).

    Attributes:
        baseline_jitter: Max per-glyph offset on both axes (design units)
        size_jitter: Glyph scale spread, scale = 1 + uniform(+-size_jitter/2)
        rotation_jitter: Max per-glyph rotation in degrees
        ink_opacity: How much glyph opacity may drop, 0-1
        error_rate: Probability of a crossed-out mistake before a word
        stroke_width: Max extra stroke thickness (design units)
    """
    baseline_jitter: float = 4
    size_jitter: float = 0.1
    rotation_jitter: float = 2
    ink_opacity: float = 0.8
    error_rate: float = 0.02
    stroke_width: float = 0.5

    def __post_init__(self) -> None:
        """Validate ranges on construction."""
        for name in ("baseline_jitter", "size_jitter", "rotation_jitter", "stroke_width"):
            value = getattr(self, name)
            if value < 0:
                raise ValueError(f"{name} must be non-negative: {value}")
        if not 0 <= self.ink_opacity <= 1:
            raise ValueError(f"ink_opacity must be within [0, 1]: {self.ink_opacity}")
        if not 0 <= self.error_rate < 1:
            raise ValueError(f"error_rate must be within [0, 1): {self.error_rate}")

    @classmethod
    def none(cls) -> "Randomization":
        """Settings with every perturbation switched off."""
        return cls(
            baseline_jitter=0,
            size_jitter=0,
            rotation_jitter=0,
            ink_opacity=0,
            error_rate=0,
            stroke_width=0,
        )


@dataclass(frozen=True)
class Settings:
    """
    Render settings snapshot (immutable).

    Frozen so a snapshot handed to a worker cannot change under an
    in-flight render. Use `with_seed()` to derive a seeded copy.

    Attributes:
        font_family: One of SUPPORTED_FONTS
        font_size: Font size in design units
        line_spacing: Line height multiplier
        letter_spacing: Letter spacing variance
        word_spacing: Word spacing variance
        ink_color: Ink colour as #rrggbb
        paper_pattern: Background ruling
        paper_color: Background tint
        margins: Page margins
        randomization: Jitter and mistake parameters
        seed: Render seed; None until assigned at submission

    Example:
        >>> settings = Settings(font_size=18).with_seed(7)
        >>> settings.seed
        7
    """
    font_family: str = "Caveat"
    font_size: float = 24
    line_spacing: float = 1.5
    letter_spacing: float = 2
    word_spacing: float = 5
    ink_color: str = "#000000"
    paper_pattern: PaperPattern = PaperPattern.LINED
    paper_color: PaperColor = PaperColor.WHITE
    margins: Margins = field(default_factory=Margins)
    randomization: Randomization = field(default_factory=Randomization)
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        """Validate configuration on construction."""
        if self.font_family not in SUPPORTED_FONTS:
            raise ValueError(f"Unsupported font family: {self.font_family!r}")
        if not 0 < self.font_size <= MAX_FONT_SIZE:
            raise ValueError(f"font_size must be within (0, {MAX_FONT_SIZE}]: {self.font_size}")
        if not 0 < self.line_spacing <= MAX_LINE_SPACING:
            raise ValueError(f"line_spacing must be within (0, {MAX_LINE_SPACING}]: {self.line_spacing}")
        if self.letter_spacing < 0:
            raise ValueError(f"letter_spacing must be non-negative: {self.letter_spacing}")
        if self.word_spacing < 0:
            raise ValueError(f"word_spacing must be non-negative: {self.word_spacing}")
        if not HEX_COLOR_RE.match(self.ink_color):
            raise ValueError(f"ink_color must be #rrggbb: {self.ink_color!r}")
        # Coerce plain strings so callers may pass "grid" etc.
        object.__setattr__(self, "paper_pattern", PaperPattern(self.paper_pattern))
        object.__setattr__(self, "paper_color", PaperColor(self.paper_color))
        if self.seed is not None and not 0 <= self.seed < MAX_SEED:
            raise ValueError(f"seed must be within [0, 2**63): {self.seed}")

    def with_seed(self, seed: int) -> "Settings":
        """Return a copy of these settings carrying `seed`."""
        return replace(self, seed=seed)

    @property
    def ink_rgb(self) -> tuple[int, int, int]:
        """Ink colour as an (r, g, b) tuple."""
        value = self.ink_color.lstrip("#")
        return (int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16))
