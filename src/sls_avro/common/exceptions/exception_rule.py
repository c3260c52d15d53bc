from __future__ import annotations

import asyncio
import struct
from dataclasses import dataclass
from typing import TypeAlias

import aiohttp
import orjson
from fastavro.schema import SchemaParseException, UnknownType

from sls_avro.core.types import SkipReason, Skipped

ExceptionTypes: TypeAlias = type[BaseException] | tuple[type[BaseException], ...]


class SchemaRegistryError(Exception):
    """Schema Registry 관련 기본 예외"""

    pass


class SchemaNotFoundError(SchemaRegistryError):
    """스키마를 찾을 수 없을 때 발생하는 예외 (HTTP 404)"""

    pass


class InvalidSchemaResponseError(SchemaRegistryError):
    """응답 본문이 비었거나 "schema" 문자열 필드가 없을 때 발생하는 예외"""

    pass


@dataclass(slots=True, frozen=True)
class RuleDomain:
    """예외 타입 → 건너뛰기 사유 매핑 규칙"""

    exc: ExceptionTypes
    result: SkipReason


# 레지스트리 전송 계층 (타임아웃 포함)
REGISTRY_TRANSPORT_ERRORS = (
    aiohttp.ClientError,
    asyncio.TimeoutError,
    OSError,
)

# 레지스트리 응답 본문 / 스키마 텍스트 파싱
SCHEMA_PARSE_ERRORS = (
    orjson.JSONDecodeError,
    SchemaParseException,
    UnknownType,
    ValueError,
    TypeError,
    KeyError,
)

# Avro 바이너리 디코딩 (잘린 페이로드, 스키마 불일치, 범위를 벗어난 logical type 값)
DATUM_DECODE_ERRORS = (
    EOFError,
    struct.error,
    IndexError,
    ValueError,
    TypeError,
    KeyError,
    ArithmeticError,
)


# 1) 레지스트리 규칙 (구체 -> 포괄)
RULES_REGISTRY: list[RuleDomain] = [
    RuleDomain(
        exc=SchemaRegistryError,
        result=SkipReason.RESOLUTION_FAILURE,
    ),
    RuleDomain(
        exc=REGISTRY_TRANSPORT_ERRORS,
        result=SkipReason.RESOLUTION_FAILURE,
    ),
    RuleDomain(
        exc=SCHEMA_PARSE_ERRORS,
        result=SkipReason.RESOLUTION_FAILURE,
    ),
]

# 2) 디코딩 규칙
RULES_DECODE: list[RuleDomain] = [
    RuleDomain(
        exc=DATUM_DECODE_ERRORS,
        result=SkipReason.DECODE_FAILURE,
    ),
]

RuleDict: TypeAlias = dict[str, list[RuleDomain]]
RULES_BY_KIND: RuleDict = {
    "registry": RULES_REGISTRY,
    "decode": RULES_DECODE,
}

# 경계에서 잡아야 하는 예외 (kind별)
EXPECTED_EXCEPTIONS: dict[str, tuple[type[BaseException], ...]] = {
    "registry": (SchemaRegistryError, *REGISTRY_TRANSPORT_ERRORS, *SCHEMA_PARSE_ERRORS),
    "decode": DATUM_DECODE_ERRORS,
}


def classify_exception(err: BaseException, kind: str) -> Skipped | None:
    """예외 → Skipped 분류기 (규칙 테이블 기반)

    - 규칙은 "구체 → 포괄" 순서로 선언되어 가장 특수한 규칙이 먼저 매칭됩니다.
    - 매칭되는 규칙이 없으면 None (호출자가 그대로 다시 raise)
    """
    for rule in RULES_BY_KIND.get(kind, []):
        if isinstance(err, rule.exc):
            detail = f"{type(err).__name__}: {err}" if str(err) else type(err).__name__
            return Skipped(reason=rule.result, detail=detail)
    return None
