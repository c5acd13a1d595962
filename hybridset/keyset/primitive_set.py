"""
Primitive Sets
==============

The primitives of a keyset, grouped by output prefix.

A PrimitiveSet is immutable once constructed and is meant to be shared
by reference between any number of wrappers and threads. Wrappers only
read from it.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Iterable, Iterator, Mapping

from hybridset.keyset.cryptofmt import RAW_PREFIX
from hybridset.keyset.keys import KeyStatus, OutputPrefixType


@dataclass(frozen=True, slots=True, eq=False)
class Entry:
    """
    One primitive of a primitive set.

    Attributes:
        primitive: The primitive built from the key's material
        identifier: Output prefix of the key (b"" for raw keys)
        key_id: Identifier of the key the primitive was built from
        status: Status of that key
        output_prefix_type: Prefix type of that key
    """

    primitive: Any
    identifier: bytes
    key_id: int
    status: KeyStatus = KeyStatus.ENABLED
    output_prefix_type: OutputPrefixType = OutputPrefixType.TINK

    def __repr__(self) -> str:
        return (
            f"Entry(key_id={self.key_id}, primitive={type(self.primitive).__name__}, "
            f"prefix={self.output_prefix_type.name})"
        )


class PrimitiveSet:
    """
    Immutable collection of primitives with a designated primary.

    Usage:
        ps = PrimitiveSet(entries, primary=entries[0])
        ps.entries_for_prefix(ciphertext[:5])
        ps.raw_entries()
    """

    __slots__ = ("_primary", "_entries", "_frozen")

    def __init__(self, entries: Iterable[Entry], primary: Entry) -> None:
        """
        Group entries by identifier, keeping insertion order inside each group.

        Raises:
            ValueError: If primary is not one of entries
        """
        groups: dict[bytes, list[Entry]] = {}
        found_primary = False
        for entry in entries:
            groups.setdefault(entry.identifier, []).append(entry)
            found_primary = found_primary or entry is primary

        if not found_primary:
            raise ValueError("Primary entry is not part of the primitive set")

        object.__setattr__(self, "_primary", primary)
        object.__setattr__(
            self,
            "_entries",
            MappingProxyType({prefix: tuple(group) for prefix, group in groups.items()}),
        )
        object.__setattr__(self, "_frozen", True)

    @property
    def primary(self) -> Entry:
        return self._primary

    @property
    def entries(self) -> Mapping[bytes, tuple[Entry, ...]]:
        """Read-only mapping of prefix to entries, raw entries under b\"\"."""
        return self._entries

    def entries_for_prefix(self, prefix: bytes) -> tuple[Entry, ...]:
        """All entries with the given identifier, empty if none."""
        return self._entries.get(bytes(prefix), ())

    def raw_entries(self) -> tuple[Entry, ...]:
        return self.entries_for_prefix(RAW_PREFIX)

    def all_entries(self) -> Iterator[Entry]:
        for group in self._entries.values():
            yield from group

    def __len__(self) -> int:
        return sum(len(group) for group in self._entries.values())

    def __repr__(self) -> str:
        return (
            f"PrimitiveSet(entries={len(self)}, raw={len(self.raw_entries())}, "
            f"primary_key_id={self._primary.key_id})"
        )

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("PrimitiveSet is immutable")
