"""Ordered, case-insensitive set of attribute names."""

from typing import Iterable, Iterator, List, Optional, Set

from src.relational_db.errors import AttributeNotFoundError, DuplicateAttributeError


class AttributeSet:
    """
    Keeps the spelling each name was added with (for display and the row-file
    header) while membership, lookup and removal ignore case.
    """

    def __init__(self, names: Optional[Iterable[str]] = None):
        self._names: List[str] = []
        self._keys: Set[str] = set()
        for name in names or ():
            self.add(name)

    def add(self, name: str) -> None:
        key = name.lower()
        if key in self._keys:
            raise DuplicateAttributeError(f'Attribute "{name}" already exists')
        self._keys.add(key)
        self._names.append(name)

    def remove(self, name: str) -> None:
        key = name.lower()
        if key not in self._keys:
            raise AttributeNotFoundError(f'Attribute "{name}" does not exist')
        self._keys.discard(key)
        self._names = [n for n in self._names if n.lower() != key]

    def canonical(self, name: str) -> str:
        """The stored spelling of `name`."""
        key = name.lower()
        for n in self._names:
            if n.lower() == key:
                return n
        raise AttributeNotFoundError(f'Attribute "{name}" does not exist')

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._keys

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._names))

    def __len__(self) -> int:
        return len(self._names)

    def __getitem__(self, index: int) -> str:
        return self._names[index]

    def __eq__(self, other: object) -> bool:
        if isinstance(other, AttributeSet):
            return self._names == other._names
        return NotImplemented

    def __repr__(self):
        return f"AttributeSet({self._names!r})"

    def to_list(self) -> List[str]:
        return list(self._names)
