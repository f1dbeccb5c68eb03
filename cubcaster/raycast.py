"""Ray casting of a grid map into a frame buffer, and camera movement."""

from __future__ import annotations

import math
import sys
from array import array
from dataclasses import dataclass
from typing import Protocol, Sequence

from .parse import MapConfig

WIDTH = 720
HEIGHT = 480

NO = 0
SO = 1
WE = 2
EA = 3

ROTATION_STEP = 0.00005
MOVE_STEP = 0.00008
PLANE_LENGTH = 0.66
FAR_AWAY = 1e30
INT_MAX = 2**31 - 1

_WALL = "1"


class Texture(Protocol):
    """Anything with a size and 32-bit pixels, such as an XpmImage."""

    width: int
    height: int

    def pixel(self, x: int, y: int) -> int: ...


@dataclass
class Keys:
    """Which movement keys are currently held down."""

    w: bool = False
    a: bool = False
    s: bool = False
    d: bool = False
    left: bool = False
    right: bool = False


@dataclass(frozen=True)
class RayHit:
    """The result of casting one screen column's ray through the grid."""

    pos_x: float
    pos_y: float
    ray_dir_x: float
    ray_dir_y: float
    map_x: int
    map_y: int
    side: int
    perp_wall_dist: float
    line_height: int
    draw_start: int
    draw_end: int
    hit: bool


def _step_delta(
    grid: Sequence[str], eye_x: float, eye_y: float, dx: float, dy: float
) -> tuple[float, float]:
    """Return the displacement allowed from the eye along (dx, dy)."""
    move_x = dx if grid[int(eye_y)][int(eye_x + dx)] != _WALL else 0.0
    move_y = dy if grid[int(eye_y + dy)][int(eye_x)] != _WALL else 0.0
    return move_x, move_y


@dataclass
class Camera:
    """Viewing direction and camera plane of the player."""

    dir_x: float = 0.0
    dir_y: float = 0.0
    plane_x: float = 0.0
    plane_y: float = 0.0

    def rotate(self, keys: Keys) -> None:
        """Turn the view a small step if a turning key is held."""
        if keys.left:
            angle = -ROTATION_STEP
        elif keys.right:
            angle = ROTATION_STEP
        else:
            return
        cos_a, sin_a = math.cos(angle), math.sin(angle)
        old_dir_x = self.dir_x
        old_plane_x = self.plane_x
        self.dir_x = self.dir_x * cos_a - self.dir_y * sin_a
        self.dir_y = old_dir_x * sin_a + self.dir_y * cos_a
        self.plane_x = self.plane_x * cos_a - self.plane_y * sin_a
        self.plane_y = old_plane_x * sin_a + self.plane_y * cos_a

    def _straight_delta(
        self, keys: Keys, grid: Sequence[str], eye: tuple[float, float]
    ) -> tuple[float, float]:
        if keys.w:
            return _step_delta(grid, *eye, self.dir_x * MOVE_STEP, self.dir_y * MOVE_STEP)
        if keys.s:
            return _step_delta(grid, *eye, -self.dir_x * MOVE_STEP, -self.dir_y * MOVE_STEP)
        return 0.0, 0.0

    def _side_delta(
        self, keys: Keys, grid: Sequence[str], eye: tuple[float, float]
    ) -> tuple[float, float]:
        if keys.d:
            return _step_delta(grid, *eye, self.plane_x * MOVE_STEP, self.plane_y * MOVE_STEP)
        if keys.a:
            return _step_delta(
                grid, *eye, -self.plane_x * MOVE_STEP, -self.plane_y * MOVE_STEP
            )
        return 0.0, 0.0

    def move_straight(
        self, keys: Keys, grid: Sequence[str], position: tuple[float, float]
    ) -> tuple[float, float]:
        """Return the position after a forward or backward step, walls permitting."""
        x, y = position
        dx, dy = self._straight_delta(keys, grid, (x + 0.5, y + 0.5))
        return x + dx, y + dy

    def move_side(
        self, keys: Keys, grid: Sequence[str], position: tuple[float, float]
    ) -> tuple[float, float]:
        """Return the position after a sideways step, walls permitting."""
        x, y = position
        dx, dy = self._side_delta(keys, grid, (x + 0.5, y + 0.5))
        return x + dx, y + dy


def initial_camera(starting_way: str) -> Camera:
    """Return the camera for a map's starting letter (N, S, E or W)."""
    cameras = {
        "E": Camera(dir_x=0.0, dir_y=1.0, plane_x=-PLANE_LENGTH, plane_y=0.0),
        "S": Camera(dir_x=-1.0, dir_y=0.0, plane_x=0.0, plane_y=-PLANE_LENGTH),
        "W": Camera(dir_x=0.0, dir_y=-1.0, plane_x=PLANE_LENGTH, plane_y=0.0),
        "N": Camera(dir_x=1.0, dir_y=0.0, plane_x=0.0, plane_y=PLANE_LENGTH),
    }
    try:
        return cameras[starting_way]
    except KeyError:
        raise ValueError(f"unknown starting way {starting_way!r}") from None


def texture_index(side: int, ray_dir_x: float, ray_dir_y: float) -> int:
    """Choose the wall texture (NO, SO, WE or EA) for a hit."""
    if side == 0:
        return EA if ray_dir_x > 0 else WE
    return NO if ray_dir_y > 0 else SO


def _line_height(perp_wall_dist: float) -> int:
    value = HEIGHT / perp_wall_dist if perp_wall_dist != 0 else math.inf
    if not math.isfinite(value) or not -(2**31) <= value < 2**31:
        return INT_MAX
    height = int(value)
    return INT_MAX if height < 0 else height


def cast_ray(
    grid: Sequence[str], camera: Camera, pos_x: float, pos_y: float, column: int
) -> RayHit:
    """Cast the ray of screen ``column`` from the eye at (pos_x, pos_y)."""
    camera_x = 2 * column / WIDTH - 1
    ray_x = camera.dir_x + camera.plane_x * camera_x
    ray_y = camera.dir_y + camera.plane_y * camera_x
    map_x, map_y = int(pos_x), int(pos_y)
    delta_x = FAR_AWAY if ray_x == 0 else abs(1 / ray_x)
    delta_y = FAR_AWAY if ray_y == 0 else abs(1 / ray_y)

    if ray_x < 0:
        step_x, side_x = -1, (pos_x - map_x) * delta_x
    else:
        step_x, side_x = 1, (map_x + 1.0 - pos_x) * delta_x
    if ray_y < 0:
        step_y, side_y = -1, (pos_y - map_y) * delta_y
    else:
        step_y, side_y = 1, (map_y + 1.0 - pos_y) * delta_y

    map_h = len(grid)
    map_w = max(map(len, grid), default=0)
    hit = False
    while True:
        if side_x < side_y:
            side_x += delta_x
            map_x += step_x
            side = 0
        else:
            side_y += delta_y
            map_y += step_y
            side = 1
        if not (0 <= map_y < map_h and 0 <= map_x < map_w):
            break
        if grid[map_y][map_x] == _WALL:
            hit = True
            break

    perp = side_x - delta_x if side == 0 else side_y - delta_y
    line_height = _line_height(perp)
    draw_start = max(0, -(line_height // 2) + HEIGHT // 2)
    draw_end = min(HEIGHT - 1, line_height // 2 + HEIGHT // 2)
    return RayHit(
        pos_x=pos_x,
        pos_y=pos_y,
        ray_dir_x=ray_x,
        ray_dir_y=ray_y,
        map_x=map_x,
        map_y=map_y,
        side=side,
        perp_wall_dist=perp,
        line_height=line_height,
        draw_start=draw_start,
        draw_end=draw_end,
        hit=hit,
    )


def wall_x(hit: RayHit) -> float:
    """Return where along the wall face the ray struck, in [0, 1)."""
    if hit.side == 0:
        value = hit.pos_y + hit.perp_wall_dist * hit.ray_dir_y
    else:
        value = hit.pos_x + hit.perp_wall_dist * hit.ray_dir_x
    return value - math.floor(value)


def rgb_to_int(rgb: Sequence[int] | None) -> int:
    """Pack an (r, g, b) triple into 0xRRGGBB; None gives 0."""
    if rgb is None:
        return 0
    red, green, blue = rgb
    return red << 16 | green << 8 | blue


class FrameBuffer:
    """A screen-sized image of 32-bit 0xAARRGGBB pixels."""

    def __init__(self, width: int = WIDTH, height: int = HEIGHT) -> None:
        self.width = width
        self.height = height
        self._pixels = array("I", bytes(4 * width * height))

    def clear(self) -> None:
        """Set every pixel to zero."""
        self._pixels = array("I", bytes(4 * self.width * self.height))

    def put_pixel(self, x: int, y: int, color: int) -> None:
        """Set a pixel; coordinates outside the buffer are ignored."""
        x, y = int(x), int(y)
        if not (0 <= x < self.width and 0 <= y < self.height):
            return
        self._pixels[y * self.width + x] = color & 0xFFFFFFFF

    def get_pixel(self, x: int, y: int) -> int:
        """Return the pixel at (x, y)."""
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"pixel ({x}, {y}) outside {self.width}x{self.height} buffer")
        return self._pixels[y * self.width + x]

    def draw_span(self, x: int, start_y: int, end_y: int, color: int) -> None:
        """Fill column ``x`` from ``start_y`` towards ``end_y``, excluding ``end_y``."""
        step = 1 if start_y <= end_y else -1
        for y in range(int(start_y), int(end_y), step):
            self.put_pixel(x, y, color)

    def to_bytes(self) -> bytes:
        """Return the pixels as little-endian BGRA bytes, row by row."""
        if sys.byteorder == "big":
            swapped = array("I", self._pixels)
            swapped.byteswap()
            return swapped.tobytes()
        return self._pixels.tobytes()


def _draw_column(
    buffer: FrameBuffer,
    config: MapConfig,
    hit: RayHit,
    textures: Sequence[Texture],
    column: int,
) -> None:
    texture = textures[texture_index(hit.side, hit.ray_dir_x, hit.ray_dir_y)]
    tex_x = int(wall_x(hit) * texture.width)
    if (hit.side == 0 and hit.ray_dir_x > 0) or (hit.side == 1 and hit.ray_dir_y < 0):
        tex_x = texture.width - tex_x - 1
    step = 1.0 * texture.height / hit.line_height
    tex_pos = (hit.draw_start - HEIGHT // 2 + hit.line_height // 2) * step

    buffer.draw_span(column, 0, hit.draw_start, rgb_to_int(config.ceiling_color))
    buffer.draw_span(column, hit.draw_end, HEIGHT, rgb_to_int(config.floor_color))
    for y in range(hit.draw_start, hit.draw_end):
        tex_y = int(tex_pos) & (texture.height - 1)
        tex_pos += step
        buffer.put_pixel(column, y, texture.pixel(tex_x, tex_y))


def render_frame(
    buffer: FrameBuffer,
    config: MapConfig,
    camera: Camera,
    position: tuple[float, float],
    textures: Sequence[Texture],
    keys: Keys,
) -> tuple[float, float]:
    """Draw one frame and apply the held keys; return the new player position.

    The camera is turned and the player moved once per screen column, as the
    keys are sampled while the frame is drawn.
    """
    buffer.clear()
    grid = config.grid
    x, y = position
    for column in range(WIDTH):
        eye = (x + 0.5, y + 0.5)
        hit = cast_ray(grid, camera, eye[0], eye[1], column)
        _draw_column(buffer, config, hit, textures, column)
        camera.rotate(keys)
        dx, dy = camera._straight_delta(keys, grid, eye)
        x += dx
        y += dy
        dx, dy = camera._side_delta(keys, grid, eye)
        x += dx
        y += dy
    return x, y