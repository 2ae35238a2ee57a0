"""
Personalized, deterministic ordering of fundraising profiles.

Every viewer sees the eligible teams in an order derived from a hash of their own identity key,
so no team is structurally favored, and the same viewer always sees the same order.
"""

from __future__ import annotations

from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from collections.abc import Callable, Iterable


FNV_OFFSET_BASIS = 0x811C9DC5
FNV_PRIME = 0x01000193
UINT32_MASK = 0xFFFFFFFF


def fnv1a_32(value: str) -> int:
    """Return the 32-bit FNV-1a hash of the UTF-8 bytes of *value*."""
    hashed = FNV_OFFSET_BASIS
    for byte in value.encode("utf-8"):
        hashed ^= byte
        hashed = (hashed * FNV_PRIME) & UINT32_MASK
    return hashed


def order_key(seed: str, team_key: str) -> int:
    """Return the sort key of *team_key* for the viewer identified by *seed*."""
    return fnv1a_32(f"{seed}|{team_key}")


def personalized_order[T](
    items: Iterable[T],
    seed: str,
    team_key: Callable[[T], str],
) -> list[T]:
    """
    Sort *items* ascending by the viewer-seeded hash of their team key.

    Args:
        items: Profiles (or anything keyed by team) to order
        seed: The viewer's identity key
        team_key: Extracts the team key from an item

    Returns:
        list: A new list; ties are broken by the team key itself

    """
    return sorted(items, key=lambda item: (order_key(seed, team_key(item)), team_key(item)))
