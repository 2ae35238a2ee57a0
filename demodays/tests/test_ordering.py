"""Tests for the personalized profile ordering."""

import uuid

import pytest

from demodays.ordering import FNV_OFFSET_BASIS, fnv1a_32, order_key, personalized_order


class TestFnv1a:
    """Verify the hash against published FNV-1a test vectors."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("", FNV_OFFSET_BASIS),
            ("a", 0xE40C292C),
            ("foobar", 0xBF9CF968),
        ],
    )
    def test_known_vectors(self, value: str, expected: int) -> None:
        """The hash matches the reference values."""
        assert fnv1a_32(value) == expected

    def test_fits_in_32_bits(self) -> None:
        """Results never exceed 32 bits."""
        assert 0 <= fnv1a_32("x" * 1000) <= 0xFFFFFFFF

    def test_utf8(self) -> None:
        """Non-ASCII input is hashed over its UTF-8 bytes."""
        assert fnv1a_32("é") != fnv1a_32("e")


class TestPersonalizedOrder:
    """Verify ordering is deterministic per viewer and a permutation across viewers."""

    @pytest.fixture()
    def team_keys(self) -> list[str]:
        """Return twenty stable team keys."""
        return [str(uuid.UUID(int=index + 1)) for index in range(20)]

    def test_deterministic(self, team_keys: list[str]) -> None:
        """The same seed always yields the same order."""
        first = personalized_order(team_keys, "viewer-1", str)
        second = personalized_order(list(reversed(team_keys)), "viewer-1", str)
        assert first == second

    def test_permutation(self, team_keys: list[str]) -> None:
        """Every item appears exactly once."""
        assert sorted(personalized_order(team_keys, "viewer-2", str)) == sorted(team_keys)

    def test_viewers_differ(self, team_keys: list[str]) -> None:
        """Different seeds produce different orders."""
        assert personalized_order(team_keys, "viewer-1", str) != personalized_order(
            team_keys,
            "viewer-2",
            str,
        )

    def test_sorted_by_key(self, team_keys: list[str]) -> None:
        """Items are ascending by their seeded hash."""
        ordered = personalized_order(team_keys, "viewer-3", str)
        keys = [order_key("viewer-3", key) for key in ordered]
        assert keys == sorted(keys)

    def test_input_not_mutated(self, team_keys: list[str]) -> None:
        """A new list is returned."""
        original = list(team_keys)
        personalized_order(team_keys, "viewer-4", str)
        assert team_keys == original

    def test_empty(self) -> None:
        """Ordering nothing yields nothing."""
        assert personalized_order([], "viewer", str) == []
