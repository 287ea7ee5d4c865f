from __future__ import annotations

# Width factors relative to font size, tuned for the Excalidraw "Normal" font.
_NARROW_CHARS = frozenset("iltr ,.")
_WIDE_CHARS = frozenset("mwMW_")
_NARROW = 0.32
_WIDE = 0.8
_CAPITAL = 0.7
_AVERAGE = 0.55


def measure_text(text: str, font_size: float) -> float:
    width = 0.0
    for char in text:
        if char in _NARROW_CHARS:
            width += font_size * _NARROW
        elif char in _WIDE_CHARS:
            width += font_size * _WIDE
        elif "A" <= char <= "Z":
            width += font_size * _CAPITAL
        else:
            width += font_size * _AVERAGE
    return width
