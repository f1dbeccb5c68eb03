import math

import pytest

from cubcaster.app import Game, Key, load_textures, main
from cubcaster.parse import parse_lines
from cubcaster.raycast import HEIGHT, WIDTH, Keys, initial_camera, rgb_to_int
from cubcaster.xpm import XpmError, XpmImage

SCENE = [
    "NO n.xpm\n",
    "SO s.xpm\n",
    "WE w.xpm\n",
    "EA e.xpm\n",
    "F 10,20,30\n",
    "C 40,50,60\n",
    "\n",
    "11111\n",
    "10001\n",
    "10N01\n",
    "10001\n",
    "11111\n",
]

COLORS = (0xFF0000, 0x00FF00, 0x0000FF, 0xFFFFFF)


def _config(lines=SCENE):
    return parse_lines(lines, texture_check=lambda path: True)


def _textures():
    return [XpmImage(4, 4, (color,) * 16) for color in COLORS]


def _game():
    return Game(_config(), _textures())


def _xpm(color):
    return (
        "/* XPM */\n"
        "static char *img[] = {\n"
        '"1 1 1 1",\n'
        f'"a c {color}",\n'
        '"a"\n'
        "};\n"
    )


def test_game_starts_at_scene_start():
    game = _game()
    assert game.position == (2.0, 2.0)
    assert game.camera == initial_camera("N")
    assert game.keys == Keys()
    assert game.running is True


def test_key_press_and_release_toggle_flags():
    game = _game()
    game.key_press(Key.W)
    game.key_press(Key.LEFT)
    assert game.keys.w is True
    assert game.keys.left is True
    game.key_release(Key.W)
    assert game.keys.w is False
    assert game.keys.left is True


def test_escape_stops_game():
    game = _game()
    game.key_press(Key.ESCAPE)
    assert game.running is False


def test_unknown_key_is_ignored():
    game = _game()
    game.key_press("q")
    game.key_press(None)
    game.key_release("q")
    assert game.keys == Keys()
    assert game.running is True


def test_tick_draws_ceiling_floor_and_wall():
    game = _game()
    frame = game.tick()
    assert frame.get_pixel(0, 0) == rgb_to_int((40, 50, 60))
    assert frame.get_pixel(0, HEIGHT - 1) == rgb_to_int((10, 20, 30))
    # The centre ray looks straight along +x at the east wall.
    assert frame.get_pixel(WIDTH // 2, HEIGHT // 2) == COLORS[3]
    assert game.position == (2.0, 2.0)


def test_tick_moves_forward_with_w():
    game = _game()
    game.key_press(Key.W)
    game.tick()
    x, y = game.position
    assert x > 2.0
    assert y == pytest.approx(2.0)


def test_tick_rotation_keeps_direction_length():
    game = _game()
    before = (game.camera.dir_x, game.camera.dir_y)
    game.key_press(Key.LEFT)
    game.tick()
    after = (game.camera.dir_x, game.camera.dir_y)
    assert after != before
    assert math.hypot(*after) == pytest.approx(1.0)
    assert game.position == (2.0, 2.0)


def test_load_textures_order(tmp_path):
    names = {}
    for key, color in zip(("n", "s", "w", "e"), ("#FF0000", "#00FF00", "#0000FF", "white")):
        path = tmp_path / f"{key}.xpm"
        path.write_text(_xpm(color))
        names[key] = str(path)
    lines = [
        f"NO {names['n']}\n",
        f"SO {names['s']}\n",
        f"WE {names['w']}\n",
        f"EA {names['e']}\n",
    ] + SCENE[4:]
    textures = load_textures(_config(lines))
    assert [texture.pixel(0, 0) for texture in textures] == list(COLORS)


def test_load_textures_missing_file(tmp_path):
    lines = [f"NO {tmp_path / 'missing.xpm'}\n"] + SCENE[1:]
    with pytest.raises(XpmError):
        load_textures(_config(lines))


def test_main_without_path(capsys):
    assert main([]) == 1
    assert "Map path is not specified" in capsys.readouterr().out


def test_main_with_too_many_arguments(capsys):
    assert main(["a.cub", "b.cub"]) == 1
    assert capsys.readouterr().out.startswith("Error\n")


def test_main_wrong_extension(capsys):
    assert main(["scene.txt"]) == 1
    assert "File format must be .cub" in capsys.readouterr().out


def test_main_missing_scene_file(tmp_path, capsys):
    assert main([str(tmp_path / "nothing.cub")]) == 1
    assert capsys.readouterr().out.startswith("Error\n")


def test_main_scene_without_textures(tmp_path, capsys):
    scene = tmp_path / "scene.cub"
    scene.write_text("".join(SCENE))
    assert main([str(scene)]) == 1
    assert capsys.readouterr().out.startswith("Error\n")