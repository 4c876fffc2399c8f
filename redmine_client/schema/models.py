"""Models for collections fetched from the Redmine API."""
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Iterable, Iterator, Optional, Tuple

ResourceRecord = Mapping  # read-only field name -> value mapping


def freeze_record(raw: Dict[str, Any]) -> ResourceRecord:
    """Wrap a decoded record so callers cannot mutate it."""
    return MappingProxyType(dict(raw))


@dataclass(frozen=True)
class CollectionEndpoint:
    """A paged listing endpoint and the response key holding its records."""

    path: str  # e.g. "/projects.json"
    key: str  # e.g. "projects"; also identifies the resource type in caches


@dataclass(frozen=True)
class ResourceCollection:
    """Every record of one resource type, in server order."""

    records: Tuple[ResourceRecord, ...] = ()
    total_count: Optional[int] = None  # server hint, may be missing

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[ResourceRecord]:
        return iter(self.records)

    @property
    def is_empty(self) -> bool:
        return not self.records


class IndexDirection(Enum):
    """Which way a NameIndex maps."""

    NAME_TO_ID = "name_to_id"
    ID_TO_NAME = "id_to_name"


class NameIndex(Mapping):
    """
    Read-only name <-> id lookup derived from a ResourceCollection.

    When two records share a name, the one fetched last wins.
    """

    def __init__(
        self,
        entries: Iterable[Tuple[Any, Any]] = (),
        direction: IndexDirection = IndexDirection.NAME_TO_ID,
    ):
        self.direction = direction
        self._entries: Dict[Any, Any] = dict(entries)

    @classmethod
    def from_collection(
        cls,
        collection: ResourceCollection,
        direction: IndexDirection = IndexDirection.NAME_TO_ID,
    ) -> "NameIndex":
        """Build the index from each record's name and id fields."""
        if direction is IndexDirection.ID_TO_NAME:
            pairs = ((int(r["id"]), r["name"]) for r in collection)
        else:
            pairs = ((r["name"], int(r["id"])) for r in collection)
        return cls(pairs, direction)

    def __getitem__(self, key: Any) -> Any:
        return self._entries[key]

    def __iter__(self) -> Iterator[Any]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"NameIndex({self._entries!r}, direction={self.direction.value})"

    def lookup(self, key: Any) -> Optional[Any]:
        """Return the mapped value, or None when the key is absent."""
        return self._entries.get(key)


@dataclass
class CollectionCache:
    """Latest fetched collection per resource type."""

    _snapshots: Dict[str, ResourceCollection] = field(default_factory=dict)

    def get(self, key: str) -> Optional[ResourceCollection]:
        return self._snapshots.get(key)

    def store(self, key: str, collection: ResourceCollection) -> None:
        """Replace the snapshot for key."""
        self._snapshots[key] = collection

    def is_empty(self, key: str) -> bool:
        """True when nothing, or only an empty collection, is cached for key."""
        snapshot = self._snapshots.get(key)
        return snapshot is None or snapshot.is_empty

    def invalidate(self, key: Optional[str] = None) -> None:
        """Drop the snapshot for key, or every snapshot when key is None."""
        if key is None:
            self._snapshots.clear()
        else:
            self._snapshots.pop(key, None)
