"""
Per-type member descriptors, computed once and cached.

A structured record's serializable members are its annotated instance
attributes in declaration order, base classes first. ClassVar and InitVar
annotations are type-level and never members. A member is transient when
annotated Annotated[T, Transient] or, on dataclasses, when declared with
field(metadata={"transient": True}).
"""

import collections
import collections.abc
import dataclasses
import logging
import threading
import types
from collections.abc import Callable
from collections.abc import Iterable
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Annotated
from typing import Any
from typing import ClassVar
from typing import Final
from typing import NamedTuple
from typing import Union
from typing import get_args
from typing import get_origin
from typing import get_type_hints

from ._errors import UnsupportedShapeError
from ._profile import ProfileContext

logger = logging.getLogger(__name__)

TRANSIENT_METADATA_KEY: Final = "transient"


class Transient:
    """
    Marks a member as excluded from serialization.

    Use it as Annotated metadata: ``city: Annotated[str, Transient]``.
    """


# Collection origins decoded from JSON arrays, mapped to the factory that
# builds the decoded value.
_COLLECTION_FACTORIES: dict[Any, Callable[[Iterable[Any]], Any]] = {
    list: list,
    tuple: tuple,
    set: set,
    frozenset: frozenset,
    collections.deque: collections.deque,
    collections.abc.Iterable: list,
    collections.abc.Collection: list,
    collections.abc.Sequence: list,
    collections.abc.MutableSequence: list,
    collections.abc.Set: frozenset,
    collections.abc.MutableSet: set,
}


class CollectionShape(NamedTuple):
    """Container factory and element type of a one-level generic."""

    container: Callable[[Iterable[Any]], Any]
    element_type: Any


def unwrap_type(tp: Any) -> Any:
    """Strips Annotated metadata and Optional wrappers from a type tag."""
    while True:
        origin = get_origin(tp)
        if origin is Annotated:
            tp = tp.__origin__
        elif origin is Union or origin is types.UnionType:
            args = [arg for arg in get_args(tp) if arg is not type(None)]
            if len(args) != 1:
                return tp
            tp = args[0]
        else:
            return tp


def collection_shape(tp: Any) -> CollectionShape | None:
    """
    Returns the container and element type of a one-level generic.

    Homogeneous tuples (tuple[T, ...]) qualify; fixed-arity tuples and
    unparameterised collections do not.
    """
    origin = get_origin(tp)
    factory = _COLLECTION_FACTORIES.get(origin)
    if factory is None:
        return None

    args = get_args(tp)
    if origin is tuple:
        if len(args) == 2 and args[1] is Ellipsis:
            return CollectionShape(tuple, args[0])
        return None
    if len(args) != 1:
        return None
    return CollectionShape(factory, args[0])


@dataclass(frozen=True, slots=True)
class MemberDescriptor:
    """One serializable member of a structured record."""

    name: str
    declared_type: Any
    collection: CollectionShape | None = None

    def get(self, instance: object) -> Any:
        return getattr(instance, self.name)

    def set(self, instance: object, value: Any) -> None:
        # Goes around __setattr__ overrides such as frozen dataclasses
        object.__setattr__(instance, self.name, value)


@dataclass(frozen=True, slots=True)
class TypeDescriptor:
    """Immutable, ordered member list of one structured record type."""

    owner: type
    members: tuple[MemberDescriptor, ...]

    def __iter__(self) -> Iterator[MemberDescriptor]:
        return iter(self.members)

    def __len__(self) -> int:
        return len(self.members)

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(member.name for member in self.members)


def _is_type_level(hint: Any) -> bool:
    if hint is ClassVar or get_origin(hint) is ClassVar:
        return True
    return hint is dataclasses.InitVar or isinstance(
        hint, dataclasses.InitVar
    )


def _is_transient(hint: Any) -> bool:
    # The marker may sit under Optional as well as at the top level
    while True:
        origin = get_origin(hint)
        if origin is Annotated:
            if any(
                meta is Transient or isinstance(meta, Transient)
                for meta in hint.__metadata__
            ):
                return True
            hint = hint.__origin__
        elif origin is Union or origin is types.UnionType:
            args = [arg for arg in get_args(hint) if arg is not type(None)]
            if len(args) != 1:
                return False
            hint = args[0]
        else:
            return False


def _transient_fields(cls: type) -> set[str]:
    if not dataclasses.is_dataclass(cls):
        return set()
    return {
        f.name
        for f in dataclasses.fields(cls)
        if f.metadata.get(TRANSIENT_METADATA_KEY)
    }


def compute_descriptor(cls: type) -> TypeDescriptor:
    """Builds the descriptor of a type from its annotations."""
    with ProfileContext("describe"):
        try:
            hints = get_type_hints(cls, include_extras=True)
        except (NameError, TypeError) as e:
            raise UnsupportedShapeError(
                f"Cannot resolve member annotations of {cls.__qualname__}"
            ) from e

        transient_fields = _transient_fields(cls)
        members = []
        for name, hint in hints.items():
            if _is_type_level(hint) or _is_transient(hint):
                continue
            if name in transient_fields:
                continue
            declared = unwrap_type(hint)
            members.append(
                MemberDescriptor(name, declared, collection_shape(declared))
            )

        return TypeDescriptor(cls, tuple(members))


class TypeRegistry:
    """
    Thread-safe, memoized map from a type to its TypeDescriptor.

    Descriptors are keyed by type identity, computed once on first use
    and kept until clear(). Concurrent first lookups of the same type
    compute it exactly once; every caller gets the same descriptor.
    """

    def __init__(self) -> None:
        self._descriptors: dict[type, TypeDescriptor] = {}
        self._lock = threading.Lock()

    def describe(self, cls: type) -> TypeDescriptor:
        descriptor = self._descriptors.get(cls)
        if descriptor is not None:
            return descriptor

        with self._lock:
            descriptor = self._descriptors.get(cls)
            if descriptor is None:
                descriptor = self._compute(cls)
                self._descriptors[cls] = descriptor
                logger.debug(
                    "Described %s with members %s",
                    cls.__qualname__,
                    descriptor.names,
                )
        return descriptor

    def _compute(self, cls: type) -> TypeDescriptor:
        return compute_descriptor(cls)

    def clear(self) -> None:
        """Drops every cached descriptor; later lookups recompute."""
        with self._lock:
            count = len(self._descriptors)
            self._descriptors.clear()
        logger.debug("Cleared %d cached type descriptors", count)

    def __contains__(self, cls: object) -> bool:
        return cls in self._descriptors

    def __len__(self) -> int:
        return len(self._descriptors)


default_registry = TypeRegistry()
