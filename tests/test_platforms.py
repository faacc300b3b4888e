"""Tests for the extension index, the path hinter and platform resolution."""

import pytest
from hypothesis import given, strategies as st

from retrovoid.models import Platform, ResolutionRule
from retrovoid.services.platforms import (
    DEFAULT_PLATFORMS,
    PLATFORM_PATH_HINTS,
    build_extension_index,
    detect_platform_from_path,
    normalize_extension,
    resolve_platform,
)


class TestExtensionIndex:
    """Test cases for build_extension_index."""

    def test_empty_input_yields_empty_index(self) -> None:
        assert build_extension_index([]) == {}

    def test_shared_extension_keeps_platform_order(self) -> None:
        platforms = [
            Platform("ps2", "PlayStation 2", "Sony", (".iso", ".chd")),
            Platform("gamecube", "GameCube", "Nintendo", (".iso", ".gcz")),
        ]

        index = build_extension_index(platforms)

        assert index[".iso"] == ["ps2", "gamecube"]
        assert index[".chd"] == ["ps2"]
        assert index[".gcz"] == ["gamecube"]

    def test_extensions_are_normalized(self) -> None:
        index = build_extension_index([Platform("nes", "NES", "Nintendo", ("NES", ".Unf"))])
        assert set(index) == {".nes", ".unf"}

    def test_duplicate_extension_in_one_platform_is_kept(self) -> None:
        index = build_extension_index([Platform("x", "X", "X", (".bin", ".bin"))])
        assert index[".bin"] == ["x", "x"]

    def test_default_platforms_do_not_claim_bin_for_ps1(self) -> None:
        index = build_extension_index(DEFAULT_PLATFORMS)
        assert "ps1" not in index[".bin"]
        assert index[".cue"][0] == "ps1"

    @given(st.lists(
        st.tuples(
            st.text(alphabet="abcdefgh", min_size=1, max_size=6),
            st.lists(st.sampled_from([".iso", ".cue", ".bin", ".zip", ".chd"]), unique=True, max_size=4),
        ),
        max_size=8,
    ))
    def test_every_claim_is_indexed(self, specs: list[tuple[str, list[str]]]) -> None:
        """Each platform appears under each of its extensions, in input order."""
        platforms = [Platform(pid, pid, "Test", tuple(exts)) for pid, exts in specs]

        index = build_extension_index(platforms)

        for extension, ids in index.items():
            expected = [p.id for p in platforms if extension in p.file_extensions]
            assert ids == expected


class TestNormalizeExtension:
    @pytest.mark.parametrize("raw,expected", [
        (".ISO", ".iso"),
        ("cue", ".cue"),
        (" .Chd ", ".chd"),
        ("", ""),
    ])
    def test_normalize(self, raw: str, expected: str) -> None:
        assert normalize_extension(raw) == expected


class TestPathHinter:
    """Test cases for detect_platform_from_path."""

    @pytest.mark.parametrize("path,expected", [
        ("/home/me/ROMs/PS2 Games/Okami.iso", "ps2"),
        ("/roms/psx/Final Fantasy VII.cue", "ps1"),
        ("D:\\Games\\GameCube\\Metroid Prime.iso", "gamecube"),
        ("/roms/sony_ps2/Okami.iso", "ps2"),
        ("/roms/games_xbox/Halo.iso", "xbox"),
        ("/roms/Super Nintendo/Zelda.sfc", "snes"),
        ("/roms/mame/pacman.zip", "arcade"),
    ])
    def test_keyword_matches(self, path: str, expected: str) -> None:
        assert detect_platform_from_path(path) == expected

    def test_no_match_returns_none(self) -> None:
        assert detect_platform_from_path("/home/me/games/Okami.iso") is None

    def test_substring_without_separator_does_not_match(self) -> None:
        # "psxtools" neither equals nor is delimited around "psx"
        assert detect_platform_from_path("/data/psxtools/game.cue") is None

    def test_table_order_decides_between_matches(self) -> None:
        # Both "ps2" and "psx" segments are present; ps2 comes first in the table
        assert detect_platform_from_path("/psx/ps2/game.iso") == "ps2"

    def test_more_specific_entries_precede_their_substrings(self) -> None:
        assert detect_platform_from_path("/roms/snes/game.sfc") == "snes"
        assert detect_platform_from_path("/roms/gbc/game.gbc") == "gbc"

    def test_custom_table_is_used(self) -> None:
        hints = (("amiga", ("amiga",)),)
        assert detect_platform_from_path("/roms/Amiga/game.adf", hints) == "amiga"
        assert detect_platform_from_path("/roms/psx/game.cue", hints) is None

    def test_table_is_ordered(self) -> None:
        ids = [platform_id for platform_id, _ in PLATFORM_PATH_HINTS]
        assert ids.index("ps2") < ids.index("ps1")
        assert ids.index("snes") < ids.index("nes")

    @given(st.text(alphabet="abcdefghijklmnopqrstuvwxyz0123456789 _-./\\", max_size=60))
    def test_case_insensitive(self, path: str) -> None:
        assert detect_platform_from_path(path.upper()) == detect_platform_from_path(path)


class TestResolvePlatform:
    """Test cases for resolve_platform and the rule it reports."""

    def test_override_wins_unconditionally(self) -> None:
        resolution = resolve_platform("/roms/PS2 Games/x.iso", ["ps2", "gamecube"], platform_override="wii")
        assert resolution.platform_id == "wii"
        assert resolution.rule is ResolutionRule.OVERRIDE

    def test_single_candidate(self) -> None:
        resolution = resolve_platform("/roms/gamecube/x.gba", ["gba"])
        assert resolution.platform_id == "gba"
        assert resolution.rule is ResolutionRule.UNIQUE_MATCH

    def test_hint_breaks_tie(self) -> None:
        resolution = resolve_platform("/home/me/PS2 Games/Okami.iso", ["gamecube", "ps2"])
        assert resolution.platform_id == "ps2"
        assert resolution.rule is ResolutionRule.HEURISTIC_MATCH

    def test_no_hint_falls_back_to_first_candidate(self) -> None:
        resolution = resolve_platform("/home/me/Games/Okami.iso", ["ps2", "gamecube"])
        assert resolution.platform_id == "ps2"
        assert resolution.rule is ResolutionRule.FALLBACK_FIRST

    def test_hint_outside_candidates_is_ignored(self) -> None:
        resolution = resolve_platform("/roms/snes/Okami.iso", ["ps2", "gamecube"])
        assert resolution.platform_id == "ps2"
        assert resolution.rule is ResolutionRule.FALLBACK_FIRST

    def test_no_candidates_without_override_raises(self) -> None:
        with pytest.raises(ValueError):
            resolve_platform("/roms/file.xyz", [])

    @given(
        candidates=st.lists(st.sampled_from(["ps2", "gamecube", "wii", "xbox"]), min_size=1, max_size=4, unique=True),
        folder=st.sampled_from(["PS2 Games", "gamecube", "Wii", "misc", "xbox"]),
    )
    def test_result_is_always_a_candidate(self, candidates: list[str], folder: str) -> None:
        resolution = resolve_platform(f"/roms/{folder}/game.iso", candidates)
        assert resolution.platform_id in candidates
