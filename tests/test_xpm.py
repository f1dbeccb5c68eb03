import pytest

from cubcaster.xcolors import lookup_color
from cubcaster.xpm import (
    XpmError,
    XpmImage,
    find_substring,
    find_unquoted,
    load_xpm,
    parse_xpm,
    parse_xpm_text,
    split_words,
    strip_comments,
    text_to_rgb,
)

XPM_TEXT = """/* XPM */
static char *sample[] = {
/* columns rows colors chars-per-pixel */
"2 2 2 1 ",
"a c red",
"b c #0000FF",   // trailing comment
/* pixels */
"ab",
"ba"
};
"""


def test_find_substring_locates_first_match():
    text = "hello world, hello"
    pos = find_substring(text, "lo")
    assert text[pos:pos + 2] == "lo"
    assert "lo" not in text[:pos + 1]


def test_find_substring_missing_gives_minus_one():
    assert find_substring("abc", "zz") == -1


def test_find_unquoted_skips_quoted_text():
    text = '"ab" ab'
    assert find_unquoted(text, "ab") == text.rindex("ab")


def test_find_unquoted_missing_gives_minus_one():
    assert find_unquoted('"//"', "//") == -1


def test_split_words_on_spaces_and_tabs():
    assert split_words("  a \t b  c\t") == ["a", "b", "c"]


def test_strip_comments_blanks_comments_only():
    text = 'a /* x */ b "/* kept */" // tail\nc'
    result = strip_comments(text)
    assert len(result) == len(text)
    assert result.split() == ["a", "b", '"/*', "kept", '*/"', "c"]


def test_text_to_rgb_hex():
    assert text_to_rgb("#ff8800", None) == 0xFF8800


def test_text_to_rgb_joins_two_words():
    assert text_to_rgb("dark", "red") == lookup_color("dark red")


def test_text_to_rgb_none_and_unknown():
    assert text_to_rgb("None") == -1
    assert text_to_rgb("nosuchcolour") == 0


def test_parse_xpm_single_char_keys():
    image = parse_xpm(["2 2 2 1", ". c #000000", "# c #FFFFFF", ".#", "#."])
    assert (image.width, image.height) == (2, 2)
    assert image.pixel(0, 0) == 0x000000
    assert image.pixel(1, 0) == 0xFFFFFF
    assert image.pixel(0, 1) == 0xFFFFFF


def test_parse_xpm_transparent_colour():
    image = parse_xpm(["1 1 1 1", "x c None", "x"])
    assert image.pixels == (0xFF000000,)


def test_parse_xpm_multi_char_keys():
    image = parse_xpm(["2 1 2 3", "aaa c #123456", "bbb c #654321", "bbbaaa"])
    assert image.pixels == (0x654321, 0x123456)


@pytest.mark.parametrize(
    "lines",
    [
        [],
        ["0 1 1 1", "x c red", "x"],
        ["1 1 1"],
        ["1 1 1 1", "x red", "x"],
        ["1 1 1 1", "x c"],
        ["1 2 1 1", "x c red", "x"],
        ["2 1 1 1", "x c red", "x"],
    ],
)
def test_parse_xpm_rejects_malformed(lines):
    with pytest.raises(XpmError):
        parse_xpm(lines)


def test_parse_xpm_text_with_comments():
    image = parse_xpm_text(XPM_TEXT)
    assert image.pixel(0, 0) == lookup_color("red")
    assert image.pixel(1, 0) == 0x0000FF
    assert image.pixel(0, 1) == image.pixel(1, 0)


def test_load_xpm_round_trip(tmp_path):
    path = tmp_path / "wall.xpm"
    path.write_text(XPM_TEXT)
    assert load_xpm(path) == parse_xpm_text(XPM_TEXT)


def test_load_xpm_missing_file(tmp_path):
    with pytest.raises(XpmError):
        load_xpm(tmp_path / "absent.xpm")


def test_pixel_out_of_range():
    image = XpmImage(1, 1, (0,))
    with pytest.raises(IndexError):
        image.pixel(1, 0)