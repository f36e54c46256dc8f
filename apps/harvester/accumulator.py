"""
Append-only, ordered record store shared by the pager and the exporter.
"""

from typing import Any, Iterable


class Accumulator:
    """Ordered sequence of records collected across all pages.

    Records are only ever appended; nothing removes or reorders them, so a
    failure mid-harvest never loses pages that were already appended.
    """

    def __init__(self) -> None:
        self._records: list[Any] = []

    def append(self, batch: Iterable[Any]) -> None:
        """Extend the sequence with ``batch``, keeping its order."""
        self._records.extend(batch)

    def snapshot(self) -> tuple[Any, ...]:
        """Read-only view of everything appended so far."""
        return tuple(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __repr__(self) -> str:
        return f"<Accumulator records={len(self._records)}>"
