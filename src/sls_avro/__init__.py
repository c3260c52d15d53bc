"""
sls_avro - 스키마 레지스트리 기반 프레임 Avro datum 디코더

[magic][schema id][Avro payload] 형식의 blob을 레코드로 디코딩하고,
선택적으로 중첩 그룹을 평탄화된 레코드 여러 건으로 펼칩니다.
"""

from sls_avro.application.codec import DecodeResult, SlsAvroCodec
from sls_avro.core.flatten import flatten
from sls_avro.core.framing import MAGIC_BIG_ENDIAN, MAGIC_LITTLE_ENDIAN, parse_frame
from sls_avro.core.types import Frame, SkipReason, Skipped

__version__ = "0.1.0"

__all__ = [
    "DecodeResult",
    "SlsAvroCodec",
    "flatten",
    "parse_frame",
    "MAGIC_BIG_ENDIAN",
    "MAGIC_LITTLE_ENDIAN",
    "Frame",
    "SkipReason",
    "Skipped",
]
