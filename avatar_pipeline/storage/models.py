from dataclasses import dataclass


@dataclass(frozen=True)
class StoredObject:
    """Result of a successful put: storage path and its public reference."""

    path: str
    public_url: str


@dataclass(frozen=True)
class ObjectInfo:
    """An entry returned when listing a namespace."""

    name: str
