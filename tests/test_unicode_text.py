from glyphgen.unicode_text import (
    cluster_width,
    display_width,
    grapheme_count,
    split_graphemes,
    truncate_to_width,
)

E_ACUTE = "e\u0301"
FAMILY = "\U0001F468\u200d\U0001F469\u200d\U0001F467"
FLAG = "\U0001F1EF\U0001F1F5"


def test_combining_marks_stay_with_base():
    assert split_graphemes(E_ACUTE + "x") == [E_ACUTE, "x"]
    assert grapheme_count(E_ACUTE * 3) == 3


def test_emoji_sequences_are_single_clusters():
    assert grapheme_count(FAMILY) == 1
    assert grapheme_count(FLAG + FLAG) == 2


def test_widths():
    assert cluster_width("a") == 1
    assert cluster_width(E_ACUTE) == 1
    assert cluster_width("中") == 2
    assert display_width("a中b") == 4
    assert display_width("") == 0


def test_truncate_never_splits_wide_glyph():
    assert truncate_to_width("a中b", 2) == "a"
    assert truncate_to_width("a中b", 3) == "a中"
    assert truncate_to_width(E_ACUTE * 4, 2) == E_ACUTE * 2
