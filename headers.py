"""Case-insensitive HTTP header multimap."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping


class Headers(Mapping[str, list[str]]):
    """Ordered mapping of lower-cased header names to every value received.

    HTTP allows the same field name to appear more than once, so each key maps
    to a list of values in the order they were added. The spelling a name was
    first added with is kept for writing it back out.
    """

    def __init__(self, pairs: Iterable[tuple[str, str]] = ()) -> None:
        self._fields: dict[str, list[str]] = {}
        self._names: dict[str, str] = {}
        for key, value in pairs:
            self.add(key, value)

    @staticmethod
    def normalize_key(key: str) -> str:
        return key.lower()

    def add(self, key: str, value: str) -> None:
        normalized = self.normalize_key(key)
        self._names.setdefault(normalized, key)
        self._fields.setdefault(normalized, []).append(value)

    def set(self, key: str, value: str) -> None:
        normalized = self.normalize_key(key)
        self._names[normalized] = key
        self._fields[normalized] = [value]

    def display_name(self, key: str) -> str:
        """Return the header name as it was spelled when added."""
        normalized = self.normalize_key(key)
        return self._names.get(normalized, normalized)

    def first(self, key: str, default: str | None = None) -> str | None:
        values = self._fields.get(self.normalize_key(key))
        if not values:
            return default
        return values[0]

    def lines(self) -> Iterator[tuple[str, str]]:
        """Yield one (key, value) pair per stored value."""
        for key, values in self._fields.items():
            for value in values:
                yield key, value

    def __getitem__(self, key: str) -> list[str]:
        return self._fields[self.normalize_key(key)]

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        return self.normalize_key(key) in self._fields

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __repr__(self) -> str:
        return f"Headers({self._fields!r})"
