"""
Document metadata store.

The caller owns the store and hands it to HTMLFrontend.parse(); the
extractors write into it as a side effect.  Names are case-sensitive and are
used exactly as supplied (e.g. the verbatim value of a <meta name="...">).
"""

from typing import Iterator, Optional

# Well-known metadata names
TITLE = "title"
CONTENT_ENCODING = "Content-Encoding"
CONTENT_TYPE = "Content-Type"
CONTENT_LANGUAGE = "Content-Language"


class Metadata:
    """
    Multi-valued mapping of metadata names to string values.

    set() replaces every value of a name (last write wins); add() appends.
    """

    def __init__(self, values: Optional[dict] = None):
        self._values: dict[str, list[str]] = {}
        for name, value in (values or {}).items():
            self.set(name, value)

    def set(self, name: str, value: Optional[str]) -> None:
        # A missing value is stored as "" so get() can still tell it apart
        # from an absent name
        self._values[name] = [value if value is not None else ""]

    def add(self, name: str, value: Optional[str]) -> None:
        self._values.setdefault(name, []).append(value if value is not None else "")

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Return the first value of *name*, or *default* when absent."""
        values = self._values.get(name)
        return values[0] if values else default

    def get_values(self, name: str) -> list[str]:
        return list(self._values.get(name, []))

    def remove(self, name: str) -> None:
        self._values.pop(name, None)

    def names(self) -> list[str]:
        """Names in insertion order."""
        return list(self._values)

    def to_dict(self) -> dict[str, list[str]]:
        return {name: list(values) for name, values in self._values.items()}

    def __contains__(self, name: object) -> bool:
        return name in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self.names())

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Metadata):
            return NotImplemented
        return self._values == other._values

    def __repr__(self) -> str:
        return f"Metadata({self._values!r})"
