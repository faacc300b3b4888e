"""Tests for title cleaning and disc detection."""

import pytest
from hypothesis import given, strategies as st

from retrovoid.services.titles import (
    DISC_EXTENSIONS,
    base_title,
    clean_rom_title,
    detect_disc_number,
    is_disc_extension,
    split_disc,
)

def _titles(categories: tuple[str, ...]) -> st.SearchStrategy[str]:
    words = st.text(alphabet=st.characters(whitelist_categories=categories, whitelist_characters="'!&.-"), min_size=1, max_size=8)
    return st.lists(words, min_size=1, max_size=4).map(" ".join)


plain_titles = _titles(("Lu", "Ll", "Nd"))
# Without digits no disc indicator can occur inside the title itself
digit_free_titles = _titles(("Lu", "Ll"))


class TestCleanRomTitle:
    """Test cases for clean_rom_title."""

    def test_strips_region_and_translation_tags(self) -> None:
        assert clean_rom_title("Chrono Trigger (USA) [T+Eng1.0]") == "Chrono Trigger"

    @pytest.mark.parametrize("raw,expected", [
        ("Super Mario World (USA)", "Super Mario World"),
        ("Sonic the Hedgehog (Europe) (Rev 1) [!]", "Sonic the Hedgehog"),
        ("Metroid {Hack}", "Metroid"),
        ("Earthbound   (USA)   Beta", "Earthbound Beta"),
        ("  Tetris  ", "Tetris"),
        ("Plain Title", "Plain Title"),
    ])
    def test_examples(self, raw: str, expected: str) -> None:
        assert clean_rom_title(raw) == expected

    def test_all_tags_reduce_to_empty(self) -> None:
        assert clean_rom_title("(USA) [!] {x}") == ""

    def test_nested_brackets_leave_fragments(self) -> None:
        # Only the innermost-closing span is removed; leftovers are acceptable
        assert clean_rom_title("Game (a (b) c)") == "Game c)"

    @given(plain_titles, st.lists(st.sampled_from(["(USA)", "(Japan)", "[!]", "[b1]", "{Hack}", "(Rev 1)"]), max_size=4))
    def test_tags_are_removed(self, title: str, tags: list[str]) -> None:
        raw = " ".join([title, *tags])
        assert clean_rom_title(raw) == clean_rom_title(title)

    @given(st.text(max_size=60))
    def test_idempotent(self, raw: str) -> None:
        once = clean_rom_title(raw)
        assert clean_rom_title(once) == once


class TestDiscDetection:
    """Test cases for detect_disc_number and base_title."""

    def test_disc_of_total(self) -> None:
        assert detect_disc_number("Final Fantasy IX (Disc 2 of 4)") == 2
        assert base_title("Final Fantasy IX (Disc 2 of 4)") == "Final Fantasy IX"

    @pytest.mark.parametrize("stem,number,title", [
        ("Game (Disc 2)", 2, "Game"),
        ("Game (disk 3)", 3, "Game"),
        ("Game (CD1)", 1, "Game"),
        ("Game [Disk 1 of 3]", 1, "Game"),
        ("Game - CD1", 1, "Game"),
        ("Game -Disc 2", 2, "Game"),
        ("Game Disc 1", 1, "Game"),
        ("Game Disc 2 (USA)", 2, "Game (USA)"),
        ("Game_CD2", 2, "Game"),
        ("Game_Disc_2_USA", 2, "Game_USA"),
        ("Metal Gear Solid (USA) (Disc 1) (v1.1)", 1, "Metal Gear Solid (USA) (v1.1)"),
    ])
    def test_indicator_forms(self, stem: str, number: int, title: str) -> None:
        assert detect_disc_number(stem) == number
        assert base_title(stem) == title

    @pytest.mark.parametrize("stem", [
        "Chrono Trigger (USA)",
        "Discworld",
        "CDi Collection",
        "Disco Elysium",
    ])
    def test_no_indicator(self, stem: str) -> None:
        assert detect_disc_number(stem) is None

    def test_first_pattern_in_order_wins(self) -> None:
        # Parenthesized form is tried before the underscore form
        assert detect_disc_number("Game_CD3 (Disc 1)") == 1

    @given(digit_free_titles, st.integers(min_value=1, max_value=99), st.sampled_from(["Disc", "Disk", "CD", "disc", "cd"]))
    def test_parenthesized_indicator(self, title: str, number: int, word: str) -> None:
        stem = f"{title} ({word} {number})"
        assert detect_disc_number(stem) == number
        assert base_title(stem) == title.strip()

    @given(plain_titles, st.integers(min_value=1, max_value=9), st.integers(min_value=1, max_value=9))
    def test_sibling_discs_share_base_title(self, title: str, first: int, second: int) -> None:
        assert base_title(f"{title} (Disc {first})") == base_title(f"{title} (Disc {second})")


class TestSplitDisc:
    """Test cases for split_disc and the disc-capable extension gate."""

    def test_disc_extension_with_indicator(self) -> None:
        assert split_disc("Final Fantasy VII (Disc 1)", ".cue") == (1, "Final Fantasy VII")

    def test_non_disc_extension_never_gets_a_number(self) -> None:
        assert split_disc("Game (Disc 1)", ".zip") == (None, "Game (Disc 1)")

    def test_disc_extension_without_indicator_keeps_stem(self) -> None:
        assert split_disc("Okami (USA)", ".iso") == (None, "Okami (USA)")

    def test_extension_set(self) -> None:
        assert DISC_EXTENSIONS == {".cue", ".bin", ".iso", ".img", ".chd", ".mds", ".ccd"}
        assert is_disc_extension(".CHD")
        assert not is_disc_extension(".m3u")
