"""
Avro 바이너리 디코더

fastavro schemaless_reader로 단일 datum을 writer 스키마 그대로 디코딩합니다.
reader 스키마 프로젝션/스키마 진화는 수행하지 않습니다 (레지스트리의 책임).
"""

from __future__ import annotations

import io
from typing import Any

from fastavro import schemaless_reader

from sls_avro.common.exceptions.exception_rule import EXPECTED_EXCEPTIONS, classify_exception
from sls_avro.core.types import DecodedRecord, SkipReason, Skipped

# 레코드가 아닌 최상위 datum을 감쌀 때 쓰는 필드명
NON_RECORD_FIELD = "value"


def decode_datum(parsed_schema: Any, payload: bytes | memoryview) -> DecodedRecord | Skipped:
    """
    페이로드 바이트를 Avro datum으로 디코딩합니다.

    Args:
        parsed_schema: fastavro.parse_schema 결과 (writer 스키마)
        payload: 프레임 헤더 이후의 바이트

    Returns:
        DecodedRecord 또는 Skipped(DECODE_FAILURE)
    """
    try:
        datum = schemaless_reader(io.BytesIO(payload), parsed_schema)
    except EXPECTED_EXCEPTIONS["decode"] as e:
        return classify_exception(e, "decode") or Skipped(SkipReason.DECODE_FAILURE, str(e))

    if isinstance(datum, dict):
        return datum
    # 최상위가 레코드가 아닌 스키마 (예: "string")
    return {NON_RECORD_FIELD: datum}
