import pytest

from cubcaster.parse import (
    ParseError,
    check_closed,
    check_file_extension,
    pad_map,
    parse_file,
    parse_lines,
)

HEADER = [
    "NO ./north.xpm",
    "SO ./south.xpm",
    "WE ./west.xpm",
    "EA ./east.xpm",
    "F 220,100,0",
    "C 225,30,0",
]

MAP = ["111111", "100101", "1010N1", "111111"]

XPM_TEXT = '"1 1 1 1",\n"x c #112233",\n"x"\n'


def accept(path):
    return True


def scene(*rows, header=HEADER):
    return [*header, "", *rows]


def test_parameters_are_read():
    config = parse_lines(scene(*MAP), accept)
    assert config.north_texture == "./north.xpm"
    assert config.south_texture == "./south.xpm"
    assert config.west_texture == "./west.xpm"
    assert config.east_texture == "./east.xpm"
    assert config.floor_color == (220, 100, 0)
    assert config.ceiling_color == (225, 30, 0)


def test_start_position():
    config = parse_lines(scene(*MAP), accept)
    row = next(i for i, r in enumerate(MAP) if "N" in r)
    assert config.starting_way == "N"
    assert config.start_x == MAP[row].index("N")
    assert config.start_y == row


def test_irregular_map_is_padded():
    rows = ["  1111", "111001", "1N0011", "11111"]
    config = parse_lines(scene(*rows), accept)
    assert config.width == max(map(len, rows))
    assert config.height == len(rows)
    assert config.grid == pad_map(rows, config.width)


def test_newlines_are_ignored():
    plain = parse_lines(scene(*MAP), accept)
    with_newlines = parse_lines([line + "\n" for line in scene(*MAP)], accept)
    assert with_newlines == plain


def test_is_wall():
    config = parse_lines(scene(*MAP), accept)
    assert config.is_wall(0, 0)
    assert not config.is_wall(1, 1)


@pytest.mark.parametrize(
    "lines",
    [
        scene("1111", "1X01", "1N01", "1111"),
        scene("1111", "1NS1", "1111"),
        scene("1111", "1001", "1111"),
        scene("1111", "10N1", "1101"),
        scene("11111", "1 0N1", "11111"),
        scene("111", "1N1", "", "111"),
        scene(*MAP, header=HEADER[:5] + ["F 1,2,3"]),
        scene(*MAP, header=HEADER[:1] + HEADER[:5]),
        scene(*MAP, header=HEADER[:4] + ["F 256,0,0", HEADER[5]]),
        scene(*MAP, header=HEADER[:4] + ["F 1,2", HEADER[5]]),
        scene(*MAP, header=["R 1920 1080"] + HEADER),
        scene(*MAP, header=["NO a b"] + HEADER[1:]),
        scene(*MAP, header=["N ./north.xpm"] + HEADER[1:]),
        HEADER,
    ],
)
def test_invalid_scenes(lines):
    with pytest.raises(ParseError):
        parse_lines(lines, accept)


def test_texture_check_failure():
    with pytest.raises(ParseError, match="texture"):
        parse_lines(scene(*MAP), lambda path: False)


def test_invalid_char_message():
    with pytest.raises(ParseError, match="X is not a valid char"):
        parse_lines(scene("1111", "1X01", "1N01", "1111"), accept)


def test_missing_colours_message():
    with pytest.raises(ParseError, match="Error in colors"):
        parse_lines(scene(*MAP, header=HEADER[:5] + ["F 1,2,3"]), accept)


def test_check_file_extension_accepts_cub():
    assert check_file_extension("maps/map1.cub") == "cub"


@pytest.mark.parametrize("name", ["map.ber", "map", ".cub", "map.cub.txt", "map.cubs"])
def test_check_file_extension_rejects(name):
    with pytest.raises(ParseError):
        check_file_extension(name)


def test_pad_map():
    assert pad_map(["1", "111"], 3) == ["1  ", "111"]


def test_check_closed_rejects_open_grid():
    with pytest.raises(ParseError, match="Map not closed"):
        check_closed(["111", "100", "111"])


def test_parse_file_with_real_textures(tmp_path):
    textures = {}
    for key in ("NO", "SO", "WE", "EA"):
        path = tmp_path / f"{key}.xpm"
        path.write_text(XPM_TEXT)
        textures[key] = str(path)
    header = [f"{key} {path}" for key, path in textures.items()] + HEADER[4:]
    cub = tmp_path / "map.cub"
    cub.write_text("\n".join(scene(*MAP, header=header)) + "\n")
    config = parse_file(cub)
    assert config.north_texture == textures["NO"]
    assert config.east_texture == textures["EA"]
    assert config.grid == MAP


def test_parse_file_missing_texture(tmp_path):
    cub = tmp_path / "map.cub"
    cub.write_text("\n".join(scene(*MAP)) + "\n")
    with pytest.raises(ParseError):
        parse_file(cub)


def test_parse_file_missing_file(tmp_path):
    with pytest.raises(ParseError):
        parse_file(tmp_path / "absent.cub", accept)