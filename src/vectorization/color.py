"""
Dominant color sampling for traced paths
"""
from collections import Counter
from typing import Iterable, Tuple

from .buffers import PixelBuffer, RGB


def dominant_color(points: Iterable[Tuple[int, int]], source: PixelBuffer) -> RGB:
    """
    Most frequent exact RGB triple of `source` at the given points.

    Ties go to the color seen first along the path (Counter keeps insertion
    order and most_common is stable).
    """
    rgb = source.rgb()
    counts: Counter = Counter()
    for x, y in points:
        r, g, b = rgb[y, x]
        counts[(int(r), int(g), int(b))] += 1

    if not counts:
        raise ValueError("Cannot sample color of an empty path")
    color, _ = counts.most_common(1)[0]
    return color
