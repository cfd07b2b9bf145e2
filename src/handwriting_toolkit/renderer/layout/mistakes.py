"""
Module: renderer.layout.mistakes

Purpose:
    Simulated writing mistakes: a deterministic wrong token derived from
    the real word, and the jagged strike-through drawn over it.

Key Functions:
    - make_wrong_word(): Wrong token for a word
    - strike_through_points(): Polyline for a hand-drawn strike-through

Dependencies:
    - math, random (std)

Used By:
    - renderer.layout.engine
"""

from __future__ import annotations

import math
import random
from typing import List, Tuple

# Design-unit constants, scaled by the engine
STRIKE_OVERHANG = 5.0
STRIKE_STEP = 10.0
STRIKE_START_WOBBLE = 5.0
STRIKE_WOBBLE = 10.0
STRIKE_WIDTH = 1.5
STRIKE_OPACITY = 0.9
STRIKE_HEIGHT_RATIO = 0.3
MISTAKE_GAP = 15.0


def make_wrong_word(word: str) -> str:
    """
    Build the wrong token written (and crossed out) before `word`.

    Short words get a stray trailing "e"; longer words become the first
    half of their reversal.

    Example:
        >>> make_wrong_word("hello")
        'oll'
        >>> make_wrong_word("to")
        'toe'
    """
    if len(word) < 3:
        return word + "e"
    return word[::-1][: math.ceil(len(word) / 2)]


def strike_through_points(
    rng: random.Random,
    start_x: float,
    end_x: float,
    y: float,
    scale: float,
) -> List[Tuple[float, float]]:
    """
    Jagged horizontal polyline from start_x to end_x around y.

    Args:
        rng: Job random source
        start_x: Left end in pixels
        end_x: Right end in pixels
        y: Centre line in pixels
        scale: Design-unit to pixel scale

    Returns:
        Polyline vertices in pixels
    """
    points = [(start_x, y + (rng.random() - 0.5) * STRIKE_START_WOBBLE * scale)]
    step = STRIKE_STEP * scale
    x = start_x
    while x < end_x:
        points.append((x, y + (rng.random() - 0.5) * STRIKE_WOBBLE * scale))
        x += step
    points.append((end_x, y + (rng.random() - 0.5) * STRIKE_WOBBLE * scale))
    return points
