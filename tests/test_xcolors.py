import pytest

from cubcaster.xcolors import lookup_color


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("snow", 0xFFFAFA),
        ("ghost white", 0xF8F8FF),
        ("black", 0x0),
        ("white", 0xFFFFFF),
        ("red", 0xFF0000),
        ("navy", 0x80),
        ("gray50", 0x7F7F7F),
        ("lightgreen", 0x90EE90),
    ],
)
def test_known_colors(name, expected):
    assert lookup_color(name) == expected


def test_none_is_transparent_marker():
    assert lookup_color("none") == -1


def test_lookup_ignores_case():
    assert lookup_color("SNOW") == lookup_color("snow")
    assert lookup_color("Ghost White") == 0xF8F8FF
    assert lookup_color("NoNe") == -1


def test_first_entry_of_repeated_name_wins():
    assert lookup_color("dark slate") == 0x2F4F4F
    assert lookup_color("light slate") == 0x778899
    assert lookup_color("light goldenrod") == 0xFAFAD2


def test_unknown_name_gives_none():
    assert lookup_color("not-a-colour") is None
    assert lookup_color("") is None


@pytest.mark.parametrize("level", range(101))
def test_gray_and_grey_agree(level):
    gray = lookup_color(f"gray{level}")
    grey = lookup_color(f"grey{level}")
    assert gray == grey
    assert 0 <= gray <= 0xFFFFFF
    red, green, blue = (gray >> 16) & 0xFF, (gray >> 8) & 0xFF, gray & 0xFF
    assert red == green == blue


def test_gray_scale_is_monotonic():
    values = [lookup_color(f"gray{level}") for level in range(101)]
    assert values == sorted(values)
    assert values[0] == lookup_color("black")
    assert values[-1] == lookup_color("white")


@pytest.mark.parametrize(
    ("spaced", "joined"),
    [
        ("ghost white", "ghostwhite"),
        ("misty rose", "mistyrose"),
        ("dodger blue", "dodgerblue"),
        ("dark orange", "darkorange"),
        ("hot pink", "hotpink"),
    ],
)
def test_spaced_and_joined_names_agree(spaced, joined):
    assert lookup_color(spaced) == lookup_color(joined)


def test_numbered_variant_one_matches_base_for_some_colors():
    for base in ("snow", "bisque", "azure", "gold", "tomato", "red"):
        assert lookup_color(f"{base}1") == lookup_color(base)