"""
Type-directed JSON mapping between Python records and JSON text.

Encodes arbitrary value graphs (scalars, sequences, sets, mappings and
annotated record classes) to compact JSON, and decodes JSON text back into
instances of a requested type without building an intermediate tree.
"""

import collections
import collections.abc
import logging
import math
from collections.abc import Iterator
from collections.abc import Mapping
from collections.abc import Sequence
from collections.abc import Set
from dataclasses import dataclass
from decimal import Decimal
from typing import IO
from typing import Any
from typing import TypeAlias
from typing import get_args
from typing import get_origin

from ._errors import ConstructionError
from ._errors import DeserializationError
from ._errors import MemberAccessError
from ._errors import TjsonError
from ._errors import UnsupportedShapeError
from ._escape import escape
from ._escape import unescape
from ._profile import HotPathStats
from ._profile import ProfileContext
from ._profile import clear_hot_path_stats
from ._profile import disable_profiling
from ._profile import enable_profiling
from ._profile import get_hot_path_stats
from ._registry import CollectionShape
from ._registry import MemberDescriptor
from ._registry import Transient
from ._registry import TypeDescriptor
from ._registry import TypeRegistry
from ._registry import collection_shape
from ._registry import default_registry
from ._registry import unwrap_type
from ._splitter import split_member
from ._splitter import split_top_level

__version__ = "0.1.0"

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

# Anything from_json accepts as a target: a class, a parameterised
# generic such as list[Person], or an Optional/Annotated wrapper of one.
TypeTag: TypeAlias = Any

_MAPPING_FACTORIES: dict[Any, type[dict[Any, Any]]] = {
    dict: dict,
    collections.OrderedDict: collections.OrderedDict,
    collections.abc.Mapping: dict,
    collections.abc.MutableMapping: dict,
}

# Classes that are never decoded through the structured-record path.
_NON_RECORD_TYPES = (
    str,
    bytes,
    int,
    float,
    Decimal,
    list,
    tuple,
    set,
    frozenset,
    dict,
    collections.deque,
)


def _type_name(target: TypeTag) -> str:
    if isinstance(target, type):
        return target.__qualname__
    return repr(target)


@dataclass(frozen=True)
class EncodeConfig:
    """
    Configures JSON encoding with immutable settings.

    omit_null_members drops record members whose value is None; mapping
    entries and sequence items are always written.
    """

    omit_null_members: bool = True
    ensure_ascii: bool = False
    separators: tuple[str, str] = (",", ":")

    def __post_init__(self) -> None:
        if not isinstance(self.omit_null_members, bool):
            raise TypeError("omit_null_members must be a boolean")
        if not isinstance(self.ensure_ascii, bool):
            raise TypeError("ensure_ascii must be a boolean")
        if len(self.separators) != 2 or not all(
            isinstance(sep, str) for sep in self.separators
        ):
            raise TypeError("separators must be an (item, key) pair of str")


@dataclass(frozen=True)
class DecodeConfig:
    """
    Configures JSON decoding with immutable settings.

    With unescape_strings disabled, string literals are returned with
    their escape sequences intact, matching payloads produced before
    escapes were reversed on decode.
    """

    unescape_strings: bool = True

    def __post_init__(self) -> None:
        if not isinstance(self.unescape_strings, bool):
            raise TypeError("unescape_strings must be a boolean")


def _encode_number(n: int | float | Decimal) -> str:
    """Encodes numeric values, spelling non-finite floats as literals."""
    if isinstance(n, float) and not math.isfinite(n):
        if math.isnan(n):
            return "NaN"
        return "Infinity" if n > 0 else "-Infinity"
    return str(n)


def _stringify_key(key: Any) -> str:
    if key is True:
        return "true"
    elif key is False:
        return "false"
    elif key is None:
        return "null"
    return str(key)


class Encoder:
    """
    Renders a value graph as JSON text.

    Dispatches on runtime shape: None, strings, booleans and numbers,
    tuples, other sequences and sets, mappings, and finally structured
    records described by the type registry.
    """

    def __init__(self, registry: TypeRegistry, config: EncodeConfig) -> None:
        self.registry = registry
        self.config = config
        self._item_separator, self._key_separator = config.separators

    def encode(self, value: Any) -> str:
        return self._encode_value(value)

    def _encode_value(self, obj: Any) -> str:  # noqa: PLR0911
        if obj is None:
            return "null"
        elif isinstance(obj, str):
            return self._encode_string(obj)
        elif obj is True:
            return "true"
        elif obj is False:
            return "false"
        elif isinstance(obj, int | float | Decimal):
            return _encode_number(obj)
        elif isinstance(obj, tuple):
            return self._encode_array(obj)
        elif isinstance(obj, Sequence | Set):
            return self._encode_array(obj)
        elif isinstance(obj, Mapping):
            return self._encode_mapping(obj)
        else:
            return self._encode_record(obj)

    def _encode_string(self, s: str) -> str:
        return '"' + escape(s, self.config.ensure_ascii) + '"'

    def _encode_array(self, items: Sequence[Any] | Set[Any]) -> str:
        encoded = [self._encode_value(item) for item in items]
        return "[" + self._item_separator.join(encoded) + "]"

    def _encode_mapping(self, mapping: Mapping[Any, Any]) -> str:
        items = [
            self._encode_string(_stringify_key(key))
            + self._key_separator
            + self._encode_value(value)
            for key, value in mapping.items()
        ]
        return "{" + self._item_separator.join(items) + "}"

    def _encode_record(self, obj: object) -> str:
        """Encodes a structured record member by member."""
        with ProfileContext("encode_record"):
            owner = type(obj)
            descriptor = self.registry.describe(owner)
            items = []
            for member in descriptor:
                try:
                    value = member.get(obj)
                except AttributeError as e:
                    raise MemberAccessError(owner, member.name, str(e)) from e

                if value is None and self.config.omit_null_members:
                    continue
                items.append(
                    self._encode_string(member.name)
                    + self._key_separator
                    + self._encode_value(value)
                )
            return "{" + self._item_separator.join(items) + "}"


def _body(text: str, closer: str) -> str:
    """Returns the text between a structure's opening and closing marks."""
    if len(text) < 2 or not text.endswith(closer):
        raise UnsupportedShapeError(f"Unterminated JSON structure: {text!r}")
    return text[1:-1]


class Decoder:
    """
    Rebuilds typed values from JSON text.

    The decoder never tokenizes a whole document. Each call looks at the
    leading character of its (trimmed) text, cuts array and object bodies
    into top-level segments, and recurses into each segment with the
    type the target declares for it.

    Errors raised here are not wrapped; JsonMapper.from_json wraps them
    once at the outermost call.
    """

    def __init__(self, registry: TypeRegistry, config: DecodeConfig) -> None:
        self.registry = registry
        self.config = config

    def decode(self, text: str, target: TypeTag) -> Any:
        trimmed = text.strip()
        if trimmed == "null":
            return None

        target = unwrap_type(target)
        if trimmed.startswith("["):
            return self._decode_array(trimmed, target)
        elif trimmed.startswith("{"):
            return self._decode_object(trimmed, target)
        return self._decode_scalar(trimmed, target)

    def _decode_array(self, text: str, target: TypeTag) -> Any:
        body = _body(text, "]")
        shape = collection_shape(target)
        if shape is not None:
            return self._decode_elements(body, shape)

        if get_origin(target) is tuple and get_args(target):
            # Fixed-arity tuple: one declared type per position
            element_types = get_args(target)
            segments = [s for s in split_top_level(body) if s.strip()]
            if len(segments) != len(element_types):
                raise UnsupportedShapeError(
                    f"Expected {len(element_types)} elements for "
                    f"{_type_name(target)}, got {len(segments)}"
                )
            return tuple(
                self.decode(segment, element_type)
                for segment, element_type in zip(
                    segments, element_types, strict=True
                )
            )

        if target is bytes or target is bytearray:
            # Binary data is encoded as an array of byte values
            return target(
                self.decode(segment, int)
                for segment in split_top_level(body)
                if segment.strip()
            )

        raise UnsupportedShapeError(
            f"Cannot decode a JSON array into {_type_name(target)}"
        )

    def _decode_elements(self, body: str, shape: CollectionShape) -> Any:
        return shape.container(
            self.decode(segment, shape.element_type)
            for segment in split_top_level(body)
            if segment.strip()
        )

    def _decode_collection(self, text: str, shape: CollectionShape) -> Any:
        trimmed = text.strip()
        if trimmed == "null":
            return None
        if not trimmed.startswith("["):
            raise UnsupportedShapeError(
                f"Expected a JSON array, got {trimmed!r}"
            )
        return self._decode_elements(_body(trimmed, "]"), shape)

    def _decode_object(self, text: str, target: TypeTag) -> Any:
        body = _body(text, "}")
        factory = _MAPPING_FACTORIES.get(get_origin(target))
        if factory is not None:
            return self._decode_mapping(body, target, factory)

        if (
            get_origin(target) is not None
            or not isinstance(target, type)
            or issubclass(target, _NON_RECORD_TYPES)
        ):
            raise UnsupportedShapeError(
                f"Cannot decode a JSON object into {_type_name(target)}"
            )
        return self._decode_record(body, target)

    def _decode_mapping(
        self, body: str, target: TypeTag, factory: type[dict[Any, Any]]
    ) -> dict[Any, Any]:
        args = get_args(target)
        if len(args) != 2:
            raise UnsupportedShapeError(
                f"{_type_name(target)} needs key and value types"
            )
        key_type = unwrap_type(args[0])
        value_type = args[1]

        result = factory()
        for key, raw_value in self._members(body):
            if key_type is not str:
                key = self._decode_scalar(key, key_type)
            result[key] = self.decode(raw_value, value_type)
        return result

    def _decode_record(self, body: str, target: type) -> Any:
        """
        Builds a record instance from an object body.

        The instance comes from the parameterless constructor; members
        whose key is present are decoded and assigned, members whose key
        is absent keep their constructed value, and unknown keys are
        ignored.
        """
        with ProfileContext("decode_record", len(body)):
            try:
                instance = target()
            except Exception as e:  # noqa: BLE001
                raise ConstructionError(target) from e

            descriptor = self.registry.describe(target)
            # Last occurrence of a duplicated key wins
            raw_members = dict(self._members(body))

            for member in descriptor:
                raw_value = raw_members.get(member.name)
                if raw_value is None:
                    continue

                if member.collection is not None:
                    value = self._decode_collection(
                        raw_value, member.collection
                    )
                else:
                    value = self.decode(raw_value, member.declared_type)

                try:
                    member.set(instance, value)
                except AttributeError as e:
                    raise MemberAccessError(target, member.name, str(e)) from e

            return instance

    def _members(self, body: str) -> Iterator[tuple[str, str]]:
        """Yields (key, raw value text) for each member of an object body."""
        for segment in split_top_level(body):
            if not segment.strip():
                continue
            parts = split_member(segment)
            if parts is None:
                raise UnsupportedShapeError(
                    f"Expected a 'key:value' member, got {segment.strip()!r}"
                )
            raw_key, raw_value = parts
            yield self._unquote(raw_key.strip()), raw_value

    def _unquote(self, literal: str) -> str:
        if len(literal) >= 2 and literal[0] == '"' and literal[-1] == '"':
            literal = literal[1:-1]
        if self.config.unescape_strings:
            return unescape(literal)
        return literal

    def _decode_scalar(  # noqa: PLR0911
        self, text: str, target: TypeTag
    ) -> Any:
        if target is str:
            if len(text) < 2 or text[0] != '"' or text[-1] != '"':
                raise UnsupportedShapeError(
                    f"Expected a JSON string, got {text!r}"
                )
            return self._unquote(text)
        elif target is bool:
            lowered = text.lower()
            if lowered == "true":
                return True
            elif lowered == "false":
                return False
            raise UnsupportedShapeError(
                f"Expected a JSON boolean, got {text!r}"
            )
        elif target is int:
            return int(text)
        elif target is float:
            return float(text)
        elif target is Decimal:
            return Decimal(text)

        raise UnsupportedShapeError(
            f"Cannot decode {text!r} into {_type_name(target)}"
        )


class JsonMapper:
    """
    Converts between typed values and JSON text.

    Holds an encoder and a decoder sharing one TypeRegistry. The
    process-wide default registry is used unless one is injected, which
    keeps descriptor caches isolated between mappers (useful in tests).
    """

    def __init__(
        self,
        registry: TypeRegistry | None = None,
        encode_config: EncodeConfig | None = None,
        decode_config: DecodeConfig | None = None,
    ) -> None:
        self.registry = default_registry if registry is None else registry
        self.encoder = Encoder(self.registry, encode_config or EncodeConfig())
        self.decoder = Decoder(self.registry, decode_config or DecodeConfig())

    def to_json(self, value: Any) -> str:
        """
        Serializes a value to JSON text.

        Raises MemberAccessError if a record member cannot be read.
        """
        return self.encoder.encode(value)

    def from_json(self, text: str, target: TypeTag) -> Any:
        """
        Deserializes JSON text into an instance of target.

        Returns None for the literal null whatever the target. Any failure
        during decoding is raised as one DeserializationError carrying the
        original exception as its cause.
        """
        if not isinstance(text, str):
            raise TypeError(
                f"the JSON text must be str, not {type(text).__name__}"
            )

        try:
            return self.decoder.decode(text, target)
        except Exception as e:  # noqa: BLE001
            logger.debug(
                "Decoding into %s failed", _type_name(target), exc_info=True
            )
            raise DeserializationError(
                f"Failed to decode JSON into {_type_name(target)}", e
            ) from e

    def clear_cache(self) -> None:
        """Drops the cached type descriptors of this mapper's registry."""
        self.registry.clear()


_default_mapper = JsonMapper()


def to_json(value: Any, **kwargs: Any) -> str:
    """
    Serializes a value to JSON text.

    Keyword arguments build an EncodeConfig for this call.
    """
    if not kwargs:
        return _default_mapper.to_json(value)
    return JsonMapper(encode_config=EncodeConfig(**kwargs)).to_json(value)


def from_json(text: str, target: TypeTag, **kwargs: Any) -> Any:
    """
    Deserializes JSON text into an instance of target.

    Keyword arguments build a DecodeConfig for this call.
    """
    if not kwargs:
        return _default_mapper.from_json(text, target)
    mapper = JsonMapper(decode_config=DecodeConfig(**kwargs))
    return mapper.from_json(text, target)


def dump(value: Any, fp: IO[str], **kwargs: Any) -> None:
    """Serializes a value as JSON into a writable file-like object."""
    if not hasattr(fp, "write"):
        raise TypeError("fp must have a write() method")

    fp.write(to_json(value, **kwargs))


def load(fp: IO[str], target: TypeTag, **kwargs: Any) -> Any:
    """Deserializes JSON read from a file-like object into target."""
    if not hasattr(fp, "read"):
        raise TypeError("fp must have a read() method")

    return from_json(fp.read(), target, **kwargs)


def clear_cache() -> None:
    """Resets the process-wide type descriptor cache."""
    default_registry.clear()


__all__ = [
    "ConstructionError",
    "DecodeConfig",
    "Decoder",
    "DeserializationError",
    "EncodeConfig",
    "Encoder",
    "HotPathStats",
    "JsonMapper",
    "MemberAccessError",
    "MemberDescriptor",
    "TjsonError",
    "Transient",
    "TypeDescriptor",
    "TypeRegistry",
    "UnsupportedShapeError",
    "clear_cache",
    "clear_hot_path_stats",
    "default_registry",
    "disable_profiling",
    "dump",
    "enable_profiling",
    "from_json",
    "get_hot_path_stats",
    "load",
    "to_json",
]
