# Client-side helpers for the referral codes table.
# Created: 2026-10-18

from __future__ import annotations

from typing import Any


def total_uses(item: dict[str, Any]) -> int:
    uses = item.get("totalUses")
    if isinstance(uses, int):
        return uses
    return item.get("timesUsed") or 0


def filter_codes(items: list[dict[str, Any]], term: str) -> list[dict[str, Any]]:
    """Case-insensitive match of *term* against code and description."""
    term = (term or "").strip().lower()
    if not term:
        return items
    return [
        item
        for item in items
        if term in (item.get("code") or "").lower()
        or term in (item.get("description") or "").lower()
    ]
