"""프레임 헤더 파서

와이어 포맷: [1바이트 magic][N바이트 스키마 ID][Avro 바이너리 페이로드]

- magic 0   → 스키마 ID 빅엔디언
- magic 255 → 스키마 ID 리틀엔디언
- 그 외     → blob 전체 거부

두 producer 계열이 서로 다른 바이트 순서를 쓰기 때문에 두 magic 값을 모두 지원합니다.
거부는 예외가 아니라 Skipped(FRAMING_REJECT)로 반환합니다.
"""

from __future__ import annotations

from typing import Final, Literal

from sls_avro.config.settings import MAX_SCHEMA_ID_SIZE
from sls_avro.core.types import Frame, SkipReason, Skipped

MAGIC_BIG_ENDIAN: Final[int] = 0x00
MAGIC_LITTLE_ENDIAN: Final[int] = 0xFF

_BYTE_ORDER_BY_MAGIC: Final[dict[int, Literal["big", "little"]]] = {
    MAGIC_BIG_ENDIAN: "big",
    MAGIC_LITTLE_ENDIAN: "little",
}


def parse_frame(
    blob: bytes | bytearray | memoryview, schema_id_size: int = MAX_SCHEMA_ID_SIZE
) -> Frame | Skipped:
    """blob 앞부분의 프레임 헤더를 파싱합니다.

    Args:
        blob: 입력 바이너리 (헤더 + Avro 페이로드)
        schema_id_size: 스키마 ID 바이트 수 (1~4)

    Returns:
        Frame 또는 Skipped(FRAMING_REJECT)
    """
    data = bytes(blob)
    if not data:
        return Skipped(SkipReason.FRAMING_REJECT, "empty input")

    magic = data[0]
    byte_order = _BYTE_ORDER_BY_MAGIC.get(magic)
    if byte_order is None:
        return Skipped(SkipReason.FRAMING_REJECT, f"unrecognized magic byte {magic}")

    if not 0 < schema_id_size <= MAX_SCHEMA_ID_SIZE:
        return Skipped(SkipReason.FRAMING_REJECT, f"no schema id (size={schema_id_size})")

    payload_offset = 1 + schema_id_size
    if len(data) < payload_offset:
        return Skipped(
            SkipReason.FRAMING_REJECT,
            f"truncated header: {len(data)} bytes, need {payload_offset}",
        )

    schema_id = int.from_bytes(data[1:payload_offset], byte_order, signed=False)
    return Frame(magic=magic, schema_id=schema_id, payload_offset=payload_offset)
