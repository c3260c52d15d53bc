"""단계별 처리 결과 타입 정의 모듈.

프레임 파싱 → 스키마 해석 → 바이너리 디코딩 각 단계는 값 또는 Skipped를 반환합니다.
"버리고 아무것도 내보내지 않음"을 암묵적인 조기 return이 아니라 타입으로 표현합니다.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any, TypeAlias


class SkipReason(StrEnum):
    """입력 blob을 건너뛴 사유"""

    FRAMING_REJECT = "framing_reject"
    RESOLUTION_FAILURE = "resolution_failure"
    DECODE_FAILURE = "decode_failure"


@dataclass(slots=True, frozen=True)
class Skipped:
    """해당 입력에서 레코드를 내보내지 않는다는 명시적 결과"""

    reason: SkipReason
    detail: str = ""

    def __str__(self) -> str:
        return f"{self.reason}: {self.detail}" if self.detail else str(self.reason)


@dataclass(slots=True, frozen=True)
class Frame:
    """프레임 헤더 파싱 결과

    Invariant: payload_offset == 1 + schema_id_size
    """

    magic: int
    schema_id: int
    payload_offset: int


@dataclass(slots=True, frozen=True)
class CachedSchema:
    """캐시에 저장되는 파싱 완료 스키마 (삽입 후 불변)"""

    id: int
    parsed_schema: Any


# 디코딩된 Avro 레코드 (필드 순서 유지)
DecodedRecord: TypeAlias = dict[str, Any]

# 외부로 내보내는 레코드
OutputRecord: TypeAlias = dict[str, Any]
