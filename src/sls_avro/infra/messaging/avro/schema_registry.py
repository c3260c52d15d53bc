"""
Schema Registry 클라이언트 구현

스키마 ID로 레지스트리에서 스키마 문서를 내려받습니다.
요청 URL은 base_url 뒤에 스키마 ID(10진수)를 그대로 이어 붙여 만듭니다.
"""

from __future__ import annotations

import asyncio

import aiohttp

from sls_avro.common.exceptions.exception_rule import SchemaNotFoundError, SchemaRegistryError
from sls_avro.common.logger import CodecLogger

logger = CodecLogger.get_logger("schema_registry", "avro")

DEFAULT_REGISTRY_TIMEOUT = 30.0


class SchemaRegistryClient:
    """
    Schema Registry 클라이언트

    GET {base_url}{schema_id} 요청으로 스키마 문서(JSON 본문)를 바이트 그대로 반환합니다.
    base_url은 필요한 경로 구분자(마지막 슬래시 등)를 이미 포함해야 합니다.
    https 대상이면 aiohttp가 TLS로 연결합니다.
    """

    def __init__(
        self,
        base_url: str,
        auth: tuple[str, str] | None = None,
        timeout: float = DEFAULT_REGISTRY_TIMEOUT,
    ):
        self.base_url = base_url
        self.auth = auth
        self.timeout = timeout
        self._session: aiohttp.ClientSession | None = None

    async def __aenter__(self):
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def _ensure_session(self) -> aiohttp.ClientSession:
        """HTTP 세션을 생성하거나 재사용합니다."""
        if self._session is None or self._session.closed:
            connector = aiohttp.TCPConnector(limit=100, limit_per_host=30)
            timeout = aiohttp.ClientTimeout(total=self.timeout)

            auth = None
            if self.auth:
                auth = aiohttp.BasicAuth(self.auth[0], self.auth[1])

            self._session = aiohttp.ClientSession(
                connector=connector,
                timeout=timeout,
                auth=auth,
            )
        return self._session

    async def close(self) -> None:
        """HTTP 세션을 종료합니다."""
        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None

    def schema_url(self, schema_id: int) -> str:
        return f"{self.base_url}{schema_id}"

    async def fetch(self, schema_id: int) -> bytes:
        """
        스키마 ID에 해당하는 레지스트리 응답 본문을 반환합니다.

        Args:
            schema_id: 스키마 ID

        Returns:
            응답 본문 (raw bytes)

        Raises:
            SchemaNotFoundError: HTTP 404
            SchemaRegistryError: 그 외 2xx가 아닌 응답, 전송 오류, 타임아웃
        """
        session = await self._ensure_session()
        url = self.schema_url(schema_id)
        logger.debug(f"스키마 조회 요청: id={schema_id}, url={url}")

        try:
            async with session.get(url) as response:
                body = await response.read()

                if response.status == 404:
                    raise SchemaNotFoundError(f"schema id {schema_id} not found: {url}")
                if not 200 <= response.status < 300:
                    raise SchemaRegistryError(f"API Error: HTTP {response.status} from {url}")

                return body

        except asyncio.TimeoutError as e:
            raise SchemaRegistryError(
                f"HTTP request timed out after {self.timeout}s: {url}"
            ) from e
        except aiohttp.ClientError as e:
            raise SchemaRegistryError(f"HTTP request failed: {e}") from e
