"""
Pytest configuration and shared fixtures for tjson tests.

Holds the record types the tests map to and from JSON, immutable case
containers for parametrised checks, and isolation of process-wide state.
"""

from collections import deque
from collections.abc import Iterator
from dataclasses import InitVar
from dataclasses import dataclass
from dataclasses import field
from decimal import Decimal
from typing import Annotated
from typing import Any
from typing import ClassVar

import pytest

import tjson
from tjson import Transient


@dataclass
class Person:
    name: str | None = None
    age: int = 0
    city: Annotated[str | None, Transient] = field(default=None, compare=False)
    skills: list[str] = field(default_factory=list)
    SPECIES: ClassVar[str] = "Human"


@dataclass
class Team:
    teamName: str | None = None
    members: list[Person] = field(default_factory=list)


@dataclass
class Base:
    id: int = 0


@dataclass
class Employee(Base):
    name: str = ""
    manager: "Employee | None" = None
    tags: set[str] = field(default_factory=set)
    scores: tuple[int, ...] = ()
    lookup: dict[str, int] = field(default_factory=dict)


@dataclass
class Account:
    owner: str = ""
    password: str = field(
        default="", compare=False, metadata={"transient": True}
    )
    coordinates: tuple[float, float] = (0.0, 0.0)
    balances: dict[str, Decimal] = field(default_factory=dict)
    secret: InitVar[str | None] = None

    def __post_init__(self, secret: str | None) -> None:
        if secret is not None:
            self.password = secret


@dataclass(frozen=True)
class Point:
    x: float = 0.0
    y: float = 0.0


@dataclass
class Settings:
    mode: str | None = "auto"
    retries: int = 3


@dataclass
class Grid:
    matrix: list[list[int]] = field(default_factory=list)
    history: deque[int] = field(default_factory=deque)


class Address:
    """Plain annotated class, not a dataclass."""

    street: str
    zip_code: int
    registry: ClassVar[list[str]] = []

    def __init__(self) -> None:
        self.street = "unknown"
        self.zip_code = 0


class NeedsArgs:
    value: int

    def __init__(self, value: int) -> None:
        self.value = value


class Unreadable:
    """Declares a member it never assigns."""

    label: str


@dataclass(frozen=True)
class MappingCase:
    """
    Immutable container for one decode case.

    Holds JSON input, the target type to decode into, and the expected
    Python value.
    """

    description: str
    json_text: str
    target: Any
    expected: Any = None


@pytest.fixture(autouse=True)
def isolated_state() -> Iterator[None]:
    """Starts every test with an empty descriptor cache and no profiling."""
    tjson.clear_cache()
    tjson.disable_profiling()
    tjson.clear_hot_path_stats()
    yield
    tjson.disable_profiling()
    tjson.clear_hot_path_stats()


@pytest.fixture
def mapper() -> tjson.JsonMapper:
    """Provides a mapper with its own, initially empty, type registry."""
    return tjson.JsonMapper(registry=tjson.TypeRegistry())


@pytest.fixture
def team() -> Team:
    """Provides the two-member team used across round-trip tests."""
    return Team(
        "Eagles",
        [
            Person("Jane Smith", 25, "London", ["C#", "JavaScript"]),
            Person("Peter Jones", 42, "Paris", ["Go", "Rust"]),
        ],
    )


@pytest.fixture
def scalar_cases() -> list[MappingCase]:
    """
    Provides scalar decode cases for every supported scalar target.
    """
    return [
        MappingCase("simple string", '"hello"', str, "hello"),
        MappingCase("empty string", '""', str, ""),
        MappingCase("padded string", '  "padded"  ', str, "padded"),
        MappingCase("integer", "42", int, 42),
        MappingCase("negative integer", "-17", int, -17),
        MappingCase("float", "3.14", float, 3.14),
        MappingCase("exponent float", "1e3", float, 1000.0),
        MappingCase("integral float", "2", float, 2.0),
        MappingCase("true", "true", bool, True),
        MappingCase("false", "false", bool, False),
        MappingCase("upper-case boolean", "TRUE", bool, True),
        MappingCase("decimal", "1.10", Decimal, Decimal("1.10")),
        MappingCase("optional integer", "7", int | None, 7),
    ]
