from __future__ import annotations

from typing_extensions import Iterable, List, Set


class StringCollector:
    """
    Accumulates unique extracted strings.

    Strings are keyed by their exact byte content; inserting the same bytes
    again has no effect. `finalize` returns them in ascending byte order.
    """

    def __init__(self, strings: Iterable[bytes] = ()) -> None:
        self._strings: Set[bytes] = set()
        self.update(strings)

    def __len__(self) -> int:
        return len(self._strings)

    def __contains__(self, data: object) -> bool:
        return data in self._strings

    def insert(self, data: bytes) -> None:
        self._strings.add(bytes(data))

    def update(self, strings: Iterable[bytes]) -> None:
        for data in strings:
            self.insert(data)

    def finalize(self) -> List[bytes]:
        """
        Returns the collected strings sorted by byte value (not locale-aware).
        """
        return sorted(self._strings)
