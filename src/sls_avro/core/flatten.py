"""이벤트 평탄화 (fan-out)

디코딩된 레코드를 그대로 1건으로 내보내거나,
중첩 그룹(gauges, counters, histograms, meters, timers 등)의 이름 있는 항목마다
1건씩 평탄화된 레코드로 펼칩니다.

    {"host": "a", "gauges": {"cpu.load": {"value": 1}}}
    → [{"host": "a", "es_subindex": "gauges", "cpu_load_value": 1}]

    {"counters": [{"name": "x.y", "count": 5}]}
    → [{"es_subindex": "counters", "x_y_count": 5}]

- 필드명에는 "."을 쓰지 않습니다 ("." → "_").
- "name"이 없는 시퀀스 항목, 매핑이 아닌 항목은 조용히 버립니다.
- 같은 키가 겹치면 나중 값이 이깁니다 (충돌 검사 없음).
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any, Final

from sls_avro.common.logger import CodecLogger
from sls_avro.core.types import (
    AvroNode,
    MappingNode,
    OutputRecord,
    ScalarNode,
    SequenceNode,
    to_node,
    to_python,
)

logger = CodecLogger.get_logger("flatten", "core")

SUBINDEX_FIELD: Final[str] = "es_subindex"
NAME_FIELD: Final[str] = "name"


def sanitize_name(name: Any) -> str:
    return str(name).replace(".", "_")


def flatten(record: Mapping[str, Any], enabled: bool) -> list[OutputRecord]:
    """
    레코드를 출력 레코드 목록으로 변환합니다.

    Args:
        record: 디코딩된 레코드 (최상위 필드 매핑)
        enabled: 평탄화 여부. False면 최상위 필드를 그대로 담은 1건만 반환

    Returns:
        출력 레코드 목록 (0건 이상, 방출 순서 유지)
    """
    if not enabled:
        return [dict(record)]

    # 1) 최상위 필드를 스칼라(root)와 그룹(매핑/시퀀스)으로 분리
    root: OutputRecord = {}
    groups: list[tuple[str, AvroNode]] = []
    for key, node in to_node(record):
        match node:
            case ScalarNode(value=value):
                root[key] = value
            case SequenceNode() | MappingNode():
                groups.append((key, node))

    # 2) 그룹별로 이름 있는 항목마다 1건씩 펼침
    records: list[OutputRecord] = []
    for group_key, group in groups:
        records.extend(_flatten_group(root, group_key, group))
    return records


def _flatten_group(root: OutputRecord, group_key: str, group: AvroNode) -> Iterator[OutputRecord]:
    match group:
        case SequenceNode(items=items):
            for item in items:
                entry = _named_entry(item)
                if entry is None:
                    logger.debug(f"이름 없는 항목 버림: group={group_key}")
                    continue
                name, fields = entry
                yield _branch(root, group_key, name, fields)

        case MappingNode(entries=entries):
            for name, inner in entries:
                match inner:
                    case MappingNode():
                        yield _branch(root, group_key, name, inner)
                    case _:
                        logger.debug(f"매핑이 아닌 항목 버림: group={group_key}, name={name}")


def _named_entry(item: AvroNode) -> tuple[str, MappingNode] | None:
    """시퀀스 항목에서 (이름, 나머지 필드)를 꺼냅니다. "name"이 없으면 None"""
    match item:
        case MappingNode():
            match item.get(NAME_FIELD):
                case ScalarNode(value=name) if name is not None:
                    return str(name), item.without(NAME_FIELD)
    return None


def _branch(root: OutputRecord, group_key: str, name: str, fields: MappingNode) -> OutputRecord:
    prefix = sanitize_name(name)
    output = dict(root)
    output[SUBINDEX_FIELD] = group_key
    for key, child in fields:
        output[f"{prefix}_{key}"] = to_python(child)
    return output
