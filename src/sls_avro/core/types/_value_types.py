"""디코딩된 Avro 값을 태그드 트리로 표현하는 모듈.

fastavro가 돌려주는 dict/list/스칼라 값을 ScalarNode | SequenceNode | MappingNode로 감싸
평탄화 로직이 런타임 isinstance 분기 대신 match 패턴으로 형태를 구분하도록 합니다.

- str/bytes는 시퀀스가 아니라 스칼라로 취급합니다.
- MappingNode는 키 순서를 유지합니다.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from typing import Any, TypeAlias


@dataclass(slots=True, frozen=True)
class ScalarNode:
    value: Any


@dataclass(slots=True, frozen=True)
class SequenceNode:
    items: tuple[AvroNode, ...]


@dataclass(slots=True, frozen=True)
class MappingNode:
    entries: tuple[tuple[str, AvroNode], ...]

    def get(self, key: str) -> AvroNode | None:
        for name, node in self.entries:
            if name == key:
                return node
        return None

    def without(self, key: str) -> MappingNode:
        """key를 제외한 새 MappingNode"""
        return MappingNode(tuple((name, node) for name, node in self.entries if name != key))

    def __iter__(self) -> Iterator[tuple[str, AvroNode]]:
        return iter(self.entries)


AvroNode: TypeAlias = ScalarNode | SequenceNode | MappingNode


def to_node(value: Any) -> AvroNode:
    """Python 값 → 태그드 트리"""
    match value:
        case str() | bytes() | bytearray():
            return ScalarNode(value)
        case Mapping():
            return MappingNode(tuple((str(k), to_node(v)) for k, v in value.items()))
        case list() | tuple():
            return SequenceNode(tuple(to_node(item) for item in value))
        case _:
            return ScalarNode(value)


def to_python(node: AvroNode) -> Any:
    """태그드 트리 → Python 값 (dict/list/스칼라)"""
    match node:
        case ScalarNode(value=value):
            return value
        case SequenceNode(items=items):
            return [to_python(item) for item in items]
        case MappingNode(entries=entries):
            return {name: to_python(child) for name, child in entries}
