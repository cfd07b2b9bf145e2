"""
Settings Validation

Validates render-settings payloads at submission time and builds the
immutable Settings snapshot.

Payloads use the wire form (camelCase keys, nested `margins` and
`randomization` objects). snake_case keys are accepted as well so Python
callers can pass `dataclasses.asdict`-style mappings. Every violation is
collected before raising, so callers see all problems at once.
"""

from __future__ import annotations

import math
from typing import Any, Mapping, Optional

from ..models.settings import (
    DESIGN_HEIGHT,
    DESIGN_WIDTH,
    HEX_COLOR_RE,
    MAX_FONT_SIZE,
    MAX_LINE_SPACING,
    MAX_SEED,
    SUPPORTED_FONTS,
    Margins,
    PaperColor,
    PaperPattern,
    Randomization,
    Settings,
)

_MISSING = object()


class ValidationError(Exception):
    """Raised when a settings payload or submission is malformed."""

    def __init__(self, message: str, path: str = "", errors: list[str] | None = None):
        super().__init__(message)
        self.path = path
        self.errors = errors or []


def _lookup(data: Mapping[str, Any], camel: str, snake: str) -> Any:
    if camel in data:
        return data[camel]
    if snake in data:
        return data[snake]
    return _MISSING


def _number(
    value: Any,
    path: str,
    errors: list[str],
    *,
    low: float = 0.0,
    high: float = math.inf,
    low_open: bool = False,
    high_open: bool = False,
) -> Optional[float]:
    """Check a numeric field against [low, high] with optional open ends."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        errors.append(f"{path}: expected a number, got {type(value).__name__}")
        return None
    if math.isnan(value) or math.isinf(value):
        errors.append(f"{path}: must be finite")
        return None
    too_low = value <= low if low_open else value < low
    too_high = value >= high if high_open else value > high
    if too_low or too_high:
        left = "(" if low_open else "["
        right = ")" if high_open else "]"
        errors.append(f"{path}: {value} outside {left}{low}, {high}{right}")
        return None
    return float(value)


def _section(data: Mapping[str, Any], key: str, errors: list[str]) -> Mapping[str, Any]:
    value = data.get(key, _MISSING)
    if value is _MISSING or value is None:
        return {}
    if not isinstance(value, Mapping):
        errors.append(f"{key}: expected an object")
        return {}
    return value


def validate_settings(data: Mapping[str, Any]) -> Settings:
    """
    Validate a settings payload and build a Settings snapshot.

    Missing fields take their defaults. Unknown keys are ignored. The
    legacy `paperType` key is honoured when `paperPattern` is absent.

    Args:
        data: Settings mapping (wire form or snake_case)

    Returns:
        Settings instance

    Raises:
        ValidationError: If any field is malformed or out of range
    """
    if not isinstance(data, Mapping):
        raise ValidationError("Settings must be an object", errors=["settings: expected an object"])

    errors: list[str] = []
    fields: dict[str, Any] = {}

    family = _lookup(data, "fontFamily", "font_family")
    if family is not _MISSING:
        if family not in SUPPORTED_FONTS:
            errors.append(f"fontFamily: unsupported font {family!r}")
        else:
            fields["font_family"] = family

    numeric = (
        ("fontSize", "font_size", dict(low=0.0, high=MAX_FONT_SIZE, low_open=True)),
        ("lineSpacing", "line_spacing", dict(low=0.0, high=MAX_LINE_SPACING, low_open=True)),
        ("letterSpacing", "letter_spacing", {}),
        ("wordSpacing", "word_spacing", {}),
    )
    for camel, snake, bounds in numeric:
        value = _lookup(data, camel, snake)
        if value is not _MISSING:
            checked = _number(value, camel, errors, **bounds)
            if checked is not None:
                fields[snake] = checked

    color = _lookup(data, "color", "ink_color")
    if color is not _MISSING:
        if not isinstance(color, str) or not HEX_COLOR_RE.match(color):
            errors.append(f"color: expected #rrggbb, got {color!r}")
        else:
            fields["ink_color"] = color

    pattern = _lookup(data, "paperPattern", "paper_pattern")
    if pattern is _MISSING:
        pattern = data.get("paperType", _MISSING)
    if pattern is not _MISSING:
        try:
            fields["paper_pattern"] = PaperPattern(pattern)
        except ValueError:
            errors.append(f"paperPattern: unknown value {pattern!r}")

    paper_color = _lookup(data, "paperColor", "paper_color")
    if paper_color is not _MISSING:
        try:
            fields["paper_color"] = PaperColor(paper_color)
        except ValueError:
            errors.append(f"paperColor: unknown value {paper_color!r}")

    margins = _section(data, "margins", errors)
    margin_values: dict[str, float] = {}
    for side in ("top", "right", "bottom", "left"):
        if side in margins:
            checked = _number(margins[side], f"margins.{side}", errors)
            if checked is not None:
                margin_values[side] = checked
    defaults = Margins()
    merged = {side: margin_values.get(side, getattr(defaults, side)) for side in ("top", "right", "bottom", "left")}
    if merged["left"] + merged["right"] >= DESIGN_WIDTH:
        errors.append(f"margins: left + right must be smaller than page width {DESIGN_WIDTH}")
    if merged["top"] + merged["bottom"] >= DESIGN_HEIGHT:
        errors.append(f"margins: top + bottom must be smaller than page height {DESIGN_HEIGHT}")

    randomization = _section(data, "randomization", errors)
    random_fields: dict[str, float] = {}
    random_spec = (
        ("baselineJitter", "baseline_jitter", {}),
        ("sizeJitter", "size_jitter", {}),
        ("rotationJitter", "rotation_jitter", {}),
        ("inkOpacity", "ink_opacity", dict(high=1.0)),
        ("errorRate", "error_rate", dict(high=1.0, high_open=True)),
        ("strokeWidth", "stroke_width", {}),
    )
    for camel, snake, bounds in random_spec:
        value = _lookup(randomization, camel, snake)
        if value is not _MISSING:
            checked = _number(value, f"randomization.{camel}", errors, **bounds)
            if checked is not None:
                random_fields[snake] = checked

    seed = data.get("seed", _MISSING)
    if seed is not _MISSING and seed is not None:
        if isinstance(seed, bool) or not isinstance(seed, int):
            errors.append(f"seed: expected an integer, got {type(seed).__name__}")
        elif not 0 <= seed < MAX_SEED:
            errors.append(f"seed: {seed} outside [0, 2**63)")
        else:
            fields["seed"] = seed

    if errors:
        raise ValidationError(
            f"Invalid settings: {len(errors)} problem(s)",
            path=errors[0].split(":", 1)[0],
            errors=errors,
        )

    try:
        return Settings(
            margins=Margins(**merged),
            randomization=Randomization(**random_fields),
            **fields,
        )
    except ValueError as e:
        raise ValidationError(f"Invalid settings: {e}", errors=[str(e)]) from e
