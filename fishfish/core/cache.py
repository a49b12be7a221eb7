"""Local cache of domain and URL records."""

from collections.abc import Iterable, Iterator
from typing import Any

from fishfish.models.entities import Domain, EntityKind, Record, Url


class EntityCache:
    """
    Identifier-keyed records for both entity kinds.

    Every method is synchronous, so a read followed by a write never interleaves
    with another coroutine. Not thread-safe.
    """

    def __init__(self) -> None:
        self._stores: dict[EntityKind, dict[str, Record]] = {kind: {} for kind in EntityKind}

    @property
    def domains(self) -> dict[str, Domain]:
        """Live mapping of cached domains."""
        return self._stores[EntityKind.DOMAINS]  # type: ignore[return-value]

    @property
    def urls(self) -> dict[str, Url]:
        """Live mapping of cached URLs."""
        return self._stores[EntityKind.URLS]  # type: ignore[return-value]

    def get(self, kind: EntityKind, identifier: str) -> Record | None:
        return self._stores[kind].get(identifier)

    def set(self, kind: EntityKind, record: Record, *, key: str | None = None) -> None:
        """
        Store a record, replacing any existing entry.

        Args:
            kind: Domains or URLs.
            record: Record to store.
            key: Cache key. Defaults to the record identifier.
        """
        self._stores[kind][key or record.identifier] = record

    def set_partial(self, kind: EntityKind, identifiers: Iterable[str]) -> int:
        """
        Store identifier-only records for identifiers that are not cached yet.

        Existing entries are kept so a complete record is never downgraded.

        Returns:
            Number of entries added.
        """
        store = self._stores[kind]
        added = 0
        for identifier in identifiers:
            if identifier in store:
                continue
            store[identifier] = kind.record_type.partial(identifier)
            added += 1
        return added

    def merge(self, kind: EntityKind, identifier: str, fields: dict[str, Any]) -> Record:
        """
        Shallow-merge fields over the cached entry and store the result.

        An absent entry is treated as an empty base, so an update can land
        before the create it belongs to.

        Returns:
            The merged record.
        """
        store = self._stores[kind]
        existing = store.get(identifier)
        if existing is None:
            merged = kind.record_type(**{kind.record_type.identifier_field: identifier, **fields})
        else:
            merged = existing.merge(fields)
        store[identifier] = merged
        return merged

    def delete(self, kind: EntityKind, identifier: str) -> Record | None:
        """Remove an entry. No-op if absent."""
        return self._stores[kind].pop(identifier, None)

    def clear(self, kind: EntityKind | None = None) -> None:
        """Clear one kind, or everything."""
        kinds = [kind] if kind is not None else list(EntityKind)
        for k in kinds:
            self._stores[k].clear()

    def size(self, kind: EntityKind) -> int:
        return len(self._stores[kind])

    def __len__(self) -> int:
        return sum(len(store) for store in self._stores.values())

    def __contains__(self, item: tuple[EntityKind, str]) -> bool:
        kind, identifier = item
        return identifier in self._stores[kind]

    def __iter__(self) -> Iterator[tuple[EntityKind, Record]]:
        for kind, store in self._stores.items():
            for record in store.values():
                yield kind, record
