"""The game window: key handling, texture loading and the main loop."""

from __future__ import annotations

import enum
import sys
from typing import Sequence

from .parse import MapConfig, ParseError, check_file_extension, parse_file
from .raycast import (
    HEIGHT,
    WIDTH,
    Camera,
    FrameBuffer,
    Keys,
    initial_camera,
    render_frame,
)
from .xpm import XpmError, XpmImage, load_xpm

WINDOW_TITLE = "cub3d"


class Key(enum.Enum):
    """Keys the game reacts to."""

    ESCAPE = "escape"
    LEFT = "left"
    RIGHT = "right"
    W = "w"
    A = "a"
    S = "s"
    D = "d"


_HELD_FLAGS = {
    Key.RIGHT: "right",
    Key.LEFT: "left",
    Key.W: "w",
    Key.S: "s",
    Key.A: "a",
    Key.D: "d",
}


def load_textures(config: MapConfig) -> list[XpmImage]:
    """Load the wall textures in the order north, south, west, east."""
    paths = (
        config.north_texture,
        config.south_texture,
        config.west_texture,
        config.east_texture,
    )
    textures = []
    for path in paths:
        if not path:
            raise XpmError("empty texture path")
        textures.append(load_xpm(path))
    return textures


class Game:
    """State of a running scene: player, camera, held keys and frame buffer."""

    def __init__(self, config: MapConfig, textures: Sequence[XpmImage]) -> None:
        self.config = config
        self.textures = list(textures)
        self.camera: Camera = initial_camera(config.starting_way)
        self.position: tuple[float, float] = (config.start_x, config.start_y)
        self.keys = Keys()
        self.buffer = FrameBuffer()
        self.running = True

    def key_press(self, key: object) -> None:
        """Record a pressed key; Escape ends the game."""
        if key is Key.ESCAPE:
            self.running = False
            return
        flag = _HELD_FLAGS.get(key) if isinstance(key, Key) else None
        if flag is not None:
            setattr(self.keys, flag, True)

    def key_release(self, key: object) -> None:
        """Record a released key."""
        flag = _HELD_FLAGS.get(key) if isinstance(key, Key) else None
        if flag is not None:
            setattr(self.keys, flag, False)

    def tick(self) -> FrameBuffer:
        """Render one frame, move the player, and return the frame buffer."""
        self.position = render_frame(
            self.buffer,
            self.config,
            self.camera,
            self.position,
            self.textures,
            self.keys,
        )
        return self.buffer


def _run_window(game: Game) -> None:
    import pygame

    key_map = {
        pygame.K_ESCAPE: Key.ESCAPE,
        pygame.K_LEFT: Key.LEFT,
        pygame.K_RIGHT: Key.RIGHT,
        pygame.K_w: Key.W,
        pygame.K_a: Key.A,
        pygame.K_s: Key.S,
        pygame.K_d: Key.D,
    }
    pygame.init()
    try:
        screen = pygame.display.set_mode((WIDTH, HEIGHT))
        pygame.display.set_caption(WINDOW_TITLE)
        while game.running:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    game.running = False
                elif event.type == pygame.KEYDOWN:
                    game.key_press(key_map.get(event.key))
                elif event.type == pygame.KEYUP:
                    game.key_release(key_map.get(event.key))
            if not game.running:
                break
            frame = game.tick()
            image = pygame.image.frombuffer(frame.to_bytes(), (WIDTH, HEIGHT), "BGRA")
            screen.blit(image.convert(), (0, 0))
            pygame.display.flip()
    finally:
        pygame.quit()


def main(argv: Sequence[str] | None = None) -> int:
    """Open the scene file named on the command line and play it."""
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) != 1:
        print("Error\nMap path is not specified")
        return 1
    path = args[0]
    try:
        check_file_extension(path)
        config = parse_file(path)
        textures = load_textures(config)
    except (ParseError, XpmError) as exc:
        print(f"Error\n{exc}")
        return 1
    _run_window(Game(config, textures))
    return 0