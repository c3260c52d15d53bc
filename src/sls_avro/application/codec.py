"""프레임 Avro 코덱

blob 1건 처리 흐름 (순차, 재정렬 없음):
    FrameParser → SchemaCache(resolve) → AvroBinaryDecoder → EventFlattener → 0건 이상 레코드

어느 단계의 실패도 치명적이지 않습니다. 실패한 blob은 레코드 없이 건너뛰고
사유는 DecodeResult.skipped로 돌려줍니다. 레지스트리가 계속 응답하지 않으면
모든 레코드를 조용히 버리는 상태로 동작합니다.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from dataclasses import dataclass, field

from sls_avro.common.logger import CodecLogger
from sls_avro.config.settings import (
    MAX_SCHEMA_ID_SIZE,
    CodecSettings,
    normalize_schema_id_size,
)
from sls_avro.core.flatten import flatten as flatten_record
from sls_avro.core.framing import parse_frame
from sls_avro.core.types import OutputRecord, SkipReason, Skipped
from sls_avro.infra.messaging.avro.decoder import decode_datum
from sls_avro.infra.messaging.avro.schema_cache import SchemaCache, SchemaFetcher
from sls_avro.infra.messaging.avro.schema_registry import (
    DEFAULT_REGISTRY_TIMEOUT,
    SchemaRegistryClient,
)

logger = CodecLogger.get_logger("codec", "app")


@dataclass(slots=True, frozen=True)
class DecodeResult:
    """blob 1건의 처리 결과"""

    records: list[OutputRecord] = field(default_factory=list)
    skipped: Skipped | None = None
    schema_id: int | None = None

    @property
    def ok(self) -> bool:
        return self.skipped is None


class SlsAvroCodec:
    """
    스키마 레지스트리 기반 Avro datum 디코더

    캐시는 전역 싱글톤이 아니라 코덱 인스턴스마다 하나씩 가집니다.
    서로 다른 레지스트리를 쓰는 코덱끼리 스키마가 섞이지 않습니다.
    """

    def __init__(
        self,
        schema_registry: str,
        *,
        flatten: bool = False,
        schema_id_size: int = MAX_SCHEMA_ID_SIZE,
        registry_timeout: float = DEFAULT_REGISTRY_TIMEOUT,
        registry_auth: tuple[str, str] | None = None,
        debug_mode: bool = False,
        fetcher: SchemaFetcher | None = None,
    ) -> None:
        """
        Args:
            schema_registry: 레지스트리 URL (스키마 ID가 끝에 그대로 붙음)
            flatten: 그룹 필드 평탄화 여부
            schema_id_size: 스키마 ID 바이트 수 (범위 밖이면 4)
            registry_timeout: 레지스트리 조회 타임아웃 (초)
            registry_auth: Basic 인증 (username, password)
            debug_mode: 메시지 단위 디버그 로그
            fetcher: 레지스트리 클라이언트 대체 (테스트/커스텀 전송)
        """
        self.flatten = flatten
        self.schema_id_size = normalize_schema_id_size(schema_id_size)
        self.debug_mode = debug_mode

        self._registry_client: SchemaRegistryClient | None = None
        if fetcher is None:
            self._registry_client = SchemaRegistryClient(
                base_url=schema_registry, auth=registry_auth, timeout=registry_timeout
            )
            fetcher = self._registry_client
        self.cache = SchemaCache(fetcher)

        # debug_mode 코덱만 전용 DEBUG 로거를 쓴다 (공유 로거 레벨은 건드리지 않음)
        self._logger = logger
        if debug_mode:
            self._logger = CodecLogger.get_logger("codec_debug", "app", level=logging.DEBUG)

    @classmethod
    def from_settings(
        cls, settings: CodecSettings | None = None, fetcher: SchemaFetcher | None = None
    ) -> SlsAvroCodec:
        """CodecSettings(환경변수/.env)로 코덱 생성"""
        settings = settings or CodecSettings()
        return cls(
            settings.schema_registry,
            flatten=settings.flatten,
            schema_id_size=settings.schema_id_size,
            registry_timeout=settings.registry_timeout,
            registry_auth=settings.registry_auth,
            debug_mode=settings.debug_mode,
            fetcher=fetcher,
        )

    async def __aenter__(self) -> SlsAvroCodec:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        """코덱이 직접 만든 레지스트리 세션을 종료합니다."""
        if self._registry_client is not None:
            await self._registry_client.close()

    async def decode(self, blob: bytes | bytearray | memoryview) -> DecodeResult:
        """
        blob 1건을 디코딩합니다.

        Args:
            blob: [magic][schema id][Avro payload]

        Returns:
            DecodeResult (records는 평탄화 방출 순서)
        """
        data = bytes(blob)
        if self.debug_mode:
            self._logger.debug(f"새 메시지 수신: {len(data)} bytes")

        frame = parse_frame(data, self.schema_id_size)
        if isinstance(frame, Skipped):
            return self._skip(frame)

        if self.debug_mode:
            header = data[1 : frame.payload_offset].hex(" ")
            self._logger.debug(
                f"MAGIC BYTE: {frame.magic}, ID BYTES: {header}, SCHEMA ID: {frame.schema_id}"
            )

        schema = await self.cache.resolve(frame.schema_id)
        if isinstance(schema, Skipped):
            return self._skip(schema, frame.schema_id)

        decoded = decode_datum(schema.parsed_schema, memoryview(data)[frame.payload_offset :])
        if isinstance(decoded, Skipped):
            return self._skip(decoded, frame.schema_id)

        records = flatten_record(decoded, self.flatten)
        if self.debug_mode:
            self._logger.debug(f"레코드 {len(records)}건 생성: schema_id={frame.schema_id}")
        return DecodeResult(records=records, schema_id=frame.schema_id)

    async def iter_records(self, blob: bytes | bytearray | memoryview) -> AsyncIterator[OutputRecord]:
        """decode 결과 레코드를 하나씩 내보냅니다 (건너뛴 blob은 0건)."""
        result = await self.decode(blob)
        for record in result.records:
            yield record

    def _skip(self, skipped: Skipped, schema_id: int | None = None) -> DecodeResult:
        # 레지스트리 장애만 WARNING
        if skipped.reason is SkipReason.RESOLUTION_FAILURE:
            self._logger.warning(f"blob 건너뜀 ({skipped}): schema_id={schema_id}")
        elif self.debug_mode:
            self._logger.debug(f"blob 건너뜀 ({skipped}): schema_id={schema_id}")
        return DecodeResult(skipped=skipped, schema_id=schema_id)
