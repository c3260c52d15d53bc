"""
스키마 캐시

스키마 ID → 파싱된 Avro 스키마 매핑을 프로세스 수명 동안 보관합니다.
캐시 미스일 때만 레지스트리를 조회하며(pull-on-miss), 만료/무효화는 없습니다.
레지스트리는 append-only이고 ID는 불변이라고 가정합니다.
"""

from __future__ import annotations

import threading
from typing import Any, Protocol

import orjson
from fastavro import parse_schema

from sls_avro.common.exceptions.exception_rule import (
    EXPECTED_EXCEPTIONS,
    InvalidSchemaResponseError,
    classify_exception,
)
from sls_avro.common.logger import CodecLogger
from sls_avro.core.types import CachedSchema, SkipReason, Skipped

logger = CodecLogger.get_logger("schema_cache", "avro")


class SchemaFetcher(Protocol):
    """SchemaRegistryClient와 테스트 대역이 공통으로 구현하는 프로토콜"""

    async def fetch(self, schema_id: int) -> bytes: ...


def parse_registry_response(body: bytes) -> Any:
    """
    레지스트리 응답 본문 → fastavro 파싱 스키마

    본문은 {"schema": "<Avro 스키마 JSON 문자열>", ...} 형태여야 합니다.

    Raises:
        InvalidSchemaResponseError: 빈 본문, 객체가 아닌 본문, "schema" 문자열 누락, 빈 union
        orjson.JSONDecodeError / SchemaParseException: JSON 또는 스키마 정의 오류
    """
    if not body:
        raise InvalidSchemaResponseError("empty registry response")

    document = orjson.loads(body)
    if not isinstance(document, dict):
        raise InvalidSchemaResponseError("registry response is not a JSON object")

    schema_text = document.get("schema")
    if not isinstance(schema_text, str):
        raise InvalidSchemaResponseError('registry response has no "schema" string')

    parsed = parse_schema(orjson.loads(schema_text))
    if parsed == []:
        # 빈 union은 어떤 페이로드도 디코딩할 수 없음
        raise InvalidSchemaResponseError("registry schema is an empty union")
    return parsed


class SchemaCache:
    """
    스키마 ID 기반 캐시

    - 히트: I/O 없이 즉시 반환
    - 미스: fetcher로 조회 → JSON 파싱 → Avro 스키마 파싱 → 저장 후 반환
    - 미스 경로의 모든 실패는 Skipped(RESOLUTION_FAILURE)로 접힘 (네거티브 캐싱 없음)

    맵 접근은 락으로 보호합니다. 락은 await 구간에서 잡지 않으므로
    같은 ID에 대한 동시 미스는 각각 조회할 수 있으며, 같은 값으로 덮어쓰므로 무해합니다.
    """

    def __init__(self, fetcher: SchemaFetcher) -> None:
        self._fetcher = fetcher
        self._schemas: dict[int, CachedSchema] = {}
        self._lock = threading.Lock()

    def __contains__(self, schema_id: object) -> bool:
        with self._lock:
            return schema_id in self._schemas

    def __len__(self) -> int:
        with self._lock:
            return len(self._schemas)

    def get(self, schema_id: int) -> CachedSchema | None:
        with self._lock:
            return self._schemas.get(schema_id)

    async def resolve(self, schema_id: int) -> CachedSchema | Skipped:
        """
        스키마 ID를 파싱된 스키마로 해석합니다.

        Args:
            schema_id: 프레임에서 읽은 스키마 ID

        Returns:
            CachedSchema 또는 Skipped(RESOLUTION_FAILURE)
        """
        cached = self.get(schema_id)
        if cached is not None:
            return cached

        try:
            body = await self._fetcher.fetch(schema_id)
            parsed = parse_registry_response(body)
        except EXPECTED_EXCEPTIONS["registry"] as e:
            skipped = classify_exception(e, "registry") or Skipped(
                SkipReason.RESOLUTION_FAILURE, str(e)
            )
            logger.debug(f"스키마 해석 실패: id={schema_id}, {skipped.detail}")
            return skipped

        entry = CachedSchema(id=schema_id, parsed_schema=parsed)
        with self._lock:
            # 동시 미스로 먼저 저장된 값이 있으면 그대로 사용
            entry = self._schemas.setdefault(schema_id, entry)

        logger.info(f"스키마 캐시 저장: id={schema_id}")
        return entry
