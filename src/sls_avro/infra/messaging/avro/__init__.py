"""
Avro 역직렬화 및 Schema Registry 지원 모듈

주요 기능:
- 스키마 ID 기반 Schema Registry 조회 (aiohttp)
- 프로세스 수명 스키마 캐시 (pull-on-miss)
- fastavro 기반 단일 datum 바이너리 디코딩
"""

from sls_avro.infra.messaging.avro.decoder import decode_datum
from sls_avro.infra.messaging.avro.schema_cache import SchemaCache, SchemaFetcher
from sls_avro.infra.messaging.avro.schema_registry import SchemaRegistryClient


__all__ = [
    # Registry
    "SchemaRegistryClient",
    # Cache
    "SchemaCache",
    "SchemaFetcher",
    # Decoder
    "decode_datum",
]
