"""Reading of XPM pixmaps into plain arrays of 32-bit pixel values."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator

from .xcolors import lookup_color

TRANSPARENT = 0xFF000000
"""Pixel value stored for the colour ``None``."""

_NAME_LIMIT = 63
_INT_PREFIX = re.compile(r"\s*([+-]?\d+)")
_HEX_PREFIX = re.compile(r"\s*([+-]?)(?:0[xX](?=[0-9a-fA-F]))?([0-9a-fA-F]*)")


class XpmError(ValueError):
    """Raised when XPM data cannot be read or is malformed."""


@dataclass(frozen=True)
class XpmImage:
    """A decoded pixmap; pixels are stored row by row as 0xAARRGGBB values."""

    width: int
    height: int
    pixels: tuple[int, ...]

    def pixel(self, x: int, y: int) -> int:
        """Return the pixel value at column ``x`` of row ``y``."""
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"pixel ({x}, {y}) outside {self.width}x{self.height} image")
        return self.pixels[y * self.width + x]


def find_substring(text: str, find: str) -> int:
    """Return the position of the first ``find`` in ``text``, or -1."""
    return text.find(find)


def find_unquoted(text: str, find: str) -> int:
    """Return the position of the first ``find`` outside double quotes, or -1."""
    if not find:
        return 0
    quoted = False
    for pos in range(len(text) - len(find) + 1):
        if text[pos] == '"':
            quoted = not quoted
        if not quoted and text.startswith(find, pos):
            return pos
    return -1


def split_words(text: str) -> list[str]:
    """Split ``text`` on runs of spaces and tabs, dropping empty words."""
    return [word for word in re.split(r"[ \t]+", text) if word]


def strip_comments(text: str) -> str:
    """Blank out C comments lying outside strings, keeping the text length."""
    for opener, closer in (("/*", "*/"), ("//", "\n")):
        while (start := find_unquoted(text, opener)) != -1:
            end = text.find(closer, start + len(opener))
            stop = len(text) if end == -1 else end + len(closer)
            text = text[:start] + " " * (stop - start) + text[stop:]
    return text


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - (1 << 32) if value & 0x80000000 else value


def _parse_hex(text: str) -> int:
    match = _HEX_PREFIX.match(text)
    if not match or not match.group(2):
        return 0
    value = int(match.group(2), 16)
    return _to_int32(-value if match.group(1) == "-" else value)


def _atoi(text: str) -> int:
    match = _INT_PREFIX.match(text)
    return int(match.group(1)) if match else 0


def text_to_rgb(name: str, end: str | None = None) -> int:
    """Turn an XPM colour word into an RGB value.

    ``#RRGGBB`` is read as hexadecimal; otherwise ``name`` (joined with
    ``end`` by a space when given) is looked up among the X11 colour names.
    Unknown names give 0 and ``none`` gives -1.
    """
    if name.startswith("#"):
        return _parse_hex(name[1:])
    if end is not None:
        name = f"{name} {end}"[:_NAME_LIMIT]
    color = lookup_color(name)
    return 0 if color is None else color


def _next_line(rows: Iterator[str], what: str) -> str:
    line = next(rows, None)
    if line is None:
        raise XpmError(f"missing {what}")
    return line


def _stored(color: int) -> int:
    return TRANSPARENT if color == -1 else color & 0xFFFFFFFF


def parse_xpm(lines: Iterable[str]) -> XpmImage:
    """Decode XPM data given as its sequence of (unquoted) strings."""
    rows = iter(lines)
    header = split_words(_next_line(rows, "header"))
    if len(header) < 4:
        raise XpmError("XPM header needs width, height, colour count and chars per pixel")
    width, height, ncolors, cpp = (_atoi(word) for word in header[:4])
    if min(width, height, ncolors, cpp) <= 0:
        raise XpmError(f"invalid XPM header: {' '.join(header)!r}")

    palette: dict[str, int] = {}
    for _ in range(ncolors):
        line = _next_line(rows, "colour definition")
        words = split_words(line[cpp:])
        try:
            index = words.index("c")
        except ValueError:
            raise XpmError(f"colour definition without 'c' key: {line!r}") from None
        if index + 1 >= len(words):
            raise XpmError(f"colour definition without a colour: {line!r}")
        end = words[index + 2] if index + 2 < len(words) else None
        rgb = text_to_rgb(words[index + 1], end)
        key = line[:cpp]
        if cpp <= 2:
            palette[key] = rgb
        else:
            palette.setdefault(key, rgb)

    pixels: list[int] = []
    for _ in range(height):
        line = _next_line(rows, "pixel row")
        if len(line) < width * cpp:
            raise XpmError(f"pixel row too short: {line!r}")
        keys = (line[start:start + cpp] for start in range(0, width * cpp, cpp))
        pixels.extend(_stored(palette.get(key, 0)) for key in keys)
    return XpmImage(width, height, tuple(pixels))


def _quoted_strings(text: str) -> Iterator[str]:
    pos = 0
    while (opening := text.find('"', pos)) != -1:
        closing = text.find('"', opening + 1)
        if closing == -1:
            return
        yield text[opening + 1:closing]
        pos = closing + 1


def parse_xpm_text(text: str) -> XpmImage:
    """Decode the text of an XPM file."""
    return parse_xpm(_quoted_strings(strip_comments(text)))


def load_xpm(path: str | Path) -> XpmImage:
    """Read and decode an XPM file."""
    try:
        text = Path(path).read_text(encoding="latin-1")
    except OSError as exc:
        raise XpmError(f"cannot read {path}: {exc.strerror}") from exc
    return parse_xpm_text(text)