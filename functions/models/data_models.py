from dataclasses import dataclass
from typing import Any, Dict, Union


@dataclass
class SetDocument:
    """Replace (or merge into) the document at path."""

    path: str
    data: Dict[str, Any]
    merge: bool = False


@dataclass
class UpdateDocument:
    """Update some fields of an existing document."""

    path: str
    fields: Dict[str, Any]


@dataclass
class DeleteDocument:
    path: str


@dataclass
class DeleteStoragePrefix:
    """Delete every object whose name starts with prefix."""

    prefix: str


@dataclass
class DeleteStorageObject:
    path: str


PendingWrite = Union[
    SetDocument, UpdateDocument, DeleteDocument, DeleteStoragePrefix, DeleteStorageObject
]

