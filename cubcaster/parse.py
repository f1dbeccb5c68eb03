"""Parsing and validation of .cub scene descriptions."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable

from .xpm import XpmError, load_xpm

MAP_CHARS = frozenset("10 NSEW")
START_CHARS = frozenset("NSEW")
TEXTURE_KEYS = ("NO", "SO", "WE", "EA")
COLOR_KEYS = ("F", "C")
PARAM_COUNT = 6

_INT_PREFIX = re.compile(r"\s*([+-]?\d+)")

TextureCheck = Callable[[str], bool]


class ParseError(ValueError):
    """Raised when a scene description is invalid."""


@dataclass
class MapConfig:
    """A validated scene: textures, colours, the padded grid and the start."""

    north_texture: str
    south_texture: str
    west_texture: str
    east_texture: str
    floor_color: tuple[int, int, int]
    ceiling_color: tuple[int, int, int]
    grid: list[str]
    starting_way: str
    start_x: float
    start_y: float

    @property
    def width(self) -> int:
        return max(map(len, self.grid), default=0)

    @property
    def height(self) -> int:
        return len(self.grid)

    def is_wall(self, x: int, y: int) -> bool:
        """Tell whether grid cell (x, y) is a wall."""
        return self.grid[y][x] == "1"


def _atoi(text: str) -> int:
    match = _INT_PREFIX.match(text)
    return int(match.group(1)) if match else 0


def check_file_extension(name: str) -> str:
    """Check that ``name`` ends in ``.cub`` and return the extension."""
    parts = [part for part in name.split(".") if part]
    if len(parts) <= 1:
        raise ParseError("Wrong file format")
    if parts[-1] != "cub":
        raise ParseError("File format must be .cub")
    return parts[-1]


def pad_map(rows: Iterable[str], width: int) -> list[str]:
    """Pad every row with spaces on the right up to ``width``."""
    return [row.ljust(width) for row in rows]


def _sealed(cells: Iterable[str]) -> bool:
    for cell in cells:
        if cell == "1":
            return True
        if cell != " ":
            return False
    return True


def _space_is_enclosed(grid: list[str], x: int, y: int, width: int) -> bool:
    column = [row[x] for row in grid]
    row = grid[y]
    return (
        _sealed(column[y:])
        and _sealed(reversed(column[:y + 1]))
        and _sealed(row[x:width])
        and _sealed(reversed(row[1:x + 1]))
    )


def check_closed(grid: list[str]) -> None:
    """Raise ParseError unless the map is closed by walls."""
    width = max(map(len, grid), default=0)
    grid = pad_map(grid, width)
    height = len(grid)
    for y, row in enumerate(grid):
        for x, cell in enumerate(row):
            on_border = y in (0, height - 1) or x in (0, width - 1)
            if on_border and cell not in ("1", " "):
                raise ParseError("Map not closed")
            if cell == " " and not _space_is_enclosed(grid, x, y, width):
                raise ParseError("Map not closed")


def _texture_loads(path: str) -> bool:
    try:
        load_xpm(path)
    except XpmError:
        return False
    return True


class _SceneReader:
    """Consumes scene lines one by one and builds a MapConfig."""

    def __init__(self, texture_check: TextureCheck) -> None:
        self._texture_check = texture_check
        self._textures: dict[str, str] = {}
        self._colors: dict[str, tuple[int, int, int]] = {}
        self._params_seen = 0
        self._in_map = False
        self._rows: list[str] = []
        self._start: tuple[str, float, float] | None = None

    def feed(self, line: str) -> None:
        if len(line) <= 1:
            if self._in_map:
                raise ParseError("empty line inside the map")
            return
        if not self._in_map and self._params_seen < PARAM_COUNT:
            self._read_param(line)
            return
        self._in_map = True
        self._require_params()
        self._read_map_row(line)

    def _read_param(self, line: str) -> None:
        words = [word for word in line.split(" ") if word]
        if not words:
            raise ParseError(f"invalid parameter line: {line!r}")
        first = words[0]
        if any(key.startswith(first) for key in TEXTURE_KEYS):
            self._read_texture(words)
        elif first in COLOR_KEYS:
            self._read_color(words)
        else:
            raise ParseError(f"unknown identifier {first!r}")
        self._params_seen += 1

    def _read_texture(self, words: list[str]) -> None:
        if len(words) != 2:
            raise ParseError(f"texture line needs exactly one path: {' '.join(words)!r}")
        key, path = words
        if not self._texture_check(path):
            raise ParseError(f"cannot load texture {path!r}")
        if key not in TEXTURE_KEYS or key in self._textures:
            raise ParseError(f"unexpected or repeated texture key {key!r}")
        self._textures[key] = path

    def _read_color(self, words: list[str]) -> None:
        if len(words) != 2:
            raise ParseError(f"colour line needs exactly one value: {' '.join(words)!r}")
        key, spec = words
        parts = [part for part in spec.split(",") if part]
        if len(parts) != 3:
            raise ParseError(f"colour needs three components: {spec!r}")
        red, green, blue = (_atoi(part) for part in parts)
        if not all(0 <= value <= 255 for value in (red, green, blue)):
            raise ParseError(f"colour component out of range: {spec!r}")
        self._colors[key] = (red, green, blue)

    def _require_params(self) -> None:
        if any(key not in self._textures for key in TEXTURE_KEYS):
            raise ParseError("Error in paths")
        if any(key not in self._colors for key in COLOR_KEYS):
            raise ParseError("Error in colors")

    def _read_map_row(self, line: str) -> None:
        y = len(self._rows)
        for x, char in enumerate(line):
            if char not in MAP_CHARS:
                raise ParseError(f"{char} is not a valid char")
            if char in START_CHARS:
                if self._start is not None:
                    raise ParseError("Only one starting point valid.")
                self._start = (char, float(x), float(y))
        self._rows.append(line)

    def finish(self) -> MapConfig:
        if self._start is None:
            raise ParseError("No starting way")
        width = max(map(len, self._rows))
        grid = pad_map(self._rows, width)
        check_closed(grid)
        way, start_x, start_y = self._start
        return MapConfig(
            north_texture=self._textures["NO"],
            south_texture=self._textures["SO"],
            west_texture=self._textures["WE"],
            east_texture=self._textures["EA"],
            floor_color=self._colors["F"],
            ceiling_color=self._colors["C"],
            grid=grid,
            starting_way=way,
            start_x=start_x,
            start_y=start_y,
        )


def parse_lines(lines: Iterable[str], texture_check: TextureCheck | None = None) -> MapConfig:
    """Parse the lines of a scene description.

    ``texture_check`` decides whether a texture path is usable; by default
    the path must hold a readable XPM image.
    """
    reader = _SceneReader(texture_check or _texture_loads)
    for line in lines:
        reader.feed(line[:-1] if line.endswith("\n") else line)
    return reader.finish()


def parse_file(path: str | Path, texture_check: TextureCheck | None = None) -> MapConfig:
    """Read and parse a scene description file."""
    try:
        with open(path, encoding="utf-8") as handle:
            lines = handle.readlines()
    except OSError as exc:
        raise ParseError(f"cannot open {path}") from exc
    return parse_lines(lines, texture_check)