"""
Record graph generators for mapping benchmarks.

Builds dataclass graphs of different shapes for performance testing:
- Different sizes (single record / large team)
- Different complexity levels (flat / deeply nested)
- String-heavy members with characters that need escaping
"""

import random
import string
from dataclasses import dataclass
from dataclasses import field
from typing import Any

_ESCAPE_PROBABILITY = 0.3


@dataclass
class Address:
    street: str = ""
    city: str = ""
    zip_code: str = ""


@dataclass
class Member:
    id: int = 0
    name: str = ""
    email: str = ""
    active: bool = True
    balance: float = 0.0
    address: Address | None = None
    skills: list[str] = field(default_factory=list)


@dataclass
class Team:
    name: str = ""
    members: list[Member] = field(default_factory=list)
    scores: dict[str, int] = field(default_factory=dict)


@dataclass
class Node:
    level: int = 0
    label: str = ""
    children: list["Node"] = field(default_factory=list)


@dataclass
class Document:
    title: str = ""
    paragraphs: list[str] = field(default_factory=list)


def generate_test_records(data_type: str) -> Any:
    """Generates a record graph of the specified type."""
    generators = {
        "small_record": _generate_small_record,
        "large_team": _generate_large_team,
        "nested_structure": _generate_nested_structure,
        "string_heavy": _generate_string_heavy,
    }

    if data_type not in generators:
        raise ValueError(f"Unknown data type: {data_type}")

    return generators[data_type]()


def record_type(data_type: str) -> type:
    """Returns the top-level type produced by generate_test_records."""
    return {
        "small_record": Member,
        "large_team": Team,
        "nested_structure": Node,
        "string_heavy": Document,
    }[data_type]


def _generate_member(index: int) -> Member:
    return Member(
        id=index,
        name=f"{_random_string(6)} {_random_string(8)}",
        email=f"{_random_string(8)}@{_random_string(6)}.com",
        active=random.choice([True, False]),
        balance=round(random.uniform(0.0, 10000.0), 2),
        address=Address(
            street=f"{random.randint(1, 9999)} {_random_string(8)} St",
            city=_random_string(10),
            zip_code=f"{random.randint(10000, 99999)}",
        ),
        skills=[_random_string(5) for _ in range(random.randint(1, 5))],
    )


def _generate_small_record() -> Member:
    """Generates a single member with a nested address."""
    return _generate_member(1)


def _generate_large_team() -> Team:
    """Generates a team with many members."""
    return Team(
        name=_random_string(12),
        members=[_generate_member(i) for i in range(200)],
        scores={_random_string(6): random.randint(0, 100) for _ in range(20)},
    )


def _generate_nested_structure() -> Node:
    """Generates a tree of records several levels deep."""

    def create_node(depth: int) -> Node:
        if depth <= 0:
            return Node(0, _random_string(10))
        return Node(
            depth,
            _random_string(15),
            [create_node(depth - 1) for _ in range(3)],
        )

    return create_node(5)


def _generate_string_heavy() -> Document:
    """Generates a document whose strings are full of escapable characters."""

    def create_escapable_string() -> str:
        chars = []
        for _ in range(50):
            if random.random() < _ESCAPE_PROBABILITY:
                chars.append(random.choice(['"', "\\", "\n", "\t", "\r"]))
            else:
                chars.append(
                    random.choice(string.ascii_letters + string.digits + " ")
                )
        return "".join(chars)

    return Document(
        title=create_escapable_string(),
        paragraphs=[create_escapable_string() for _ in range(100)],
    )


def _random_string(length: int) -> str:
    """Generates a random string of specified length."""
    return "".join(random.choices(string.ascii_letters, k=length))
