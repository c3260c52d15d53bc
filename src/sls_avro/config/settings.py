"""통합 Settings 모듈 - 환경변수 기반

이 모듈의 역할:
    1. 코드에 합리적인 기본값 제공
    2. 환경변수로 오버라이드 (우선순위 높음)
    3. 타입 안전성 보장 (Pydantic 자동 검증)

설정 우선순위:
    1. 환경변수 (최우선) - export SLS_AVRO_SCHEMA_REGISTRY=...
    2. .env 파일 - config/.env
    3. 코드 기본값 (settings.py 내부)

사용 예시:
    export SLS_AVRO_SCHEMA_REGISTRY=https://registry.example.com/schemas/ids/
    export SLS_AVRO_FLATTEN=true
    python -m sls_avro decode message.bin
"""

from __future__ import annotations

from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# 설정 파일 경로
config_dir = Path(__file__).parent.parent / "config"

# 스키마 ID 최대 바이트 수 (32비트 정수)
MAX_SCHEMA_ID_SIZE = 4


def normalize_schema_id_size(value: int) -> int:
    """0~4 범위를 벗어난 스키마 ID 크기는 표준 4바이트로 되돌린다"""
    if value < 0 or value > MAX_SCHEMA_ID_SIZE:
        return MAX_SCHEMA_ID_SIZE
    return value


def yaml_settings(prefix: str) -> SettingsConfigDict:
    """환경변수 통합 설정

    Args:
        prefix: 환경변수 접두사 (예: SLS_AVRO_, LOG_)

    Returns:
        Pydantic 설정 딕셔너리

    우선순위:
        1. 환경변수 (export SLS_AVRO_SCHEMA_REGISTRY=...)
        2. .env 파일 (config/.env)
    """
    return SettingsConfigDict(
        env_prefix=prefix,
        env_file=config_dir / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


class CodecSettings(BaseSettings):
    """Avro 코덱 설정 (환경변수 기반)

    환경변수 오버라이드:
        SLS_AVRO_SCHEMA_REGISTRY: 스키마 레지스트리 URL (필수)
            스키마 ID가 URL 끝에 그대로 붙으므로 마지막 슬래시까지 포함해야 합니다.
        SLS_AVRO_FLATTEN: 그룹 필드 평탄화 여부 (기본: false)
        SLS_AVRO_SCHEMA_ID_SIZE: 스키마 ID 바이트 수 (기본: 4, 0~4 범위 밖이면 4)
        SLS_AVRO_REGISTRY_TIMEOUT: 레지스트리 조회 타임아웃 (기본: 30초)
        SLS_AVRO_REGISTRY_USERNAME / SLS_AVRO_REGISTRY_PASSWORD: Basic 인증 (선택)
        SLS_AVRO_DEBUG_MODE: 메시지 단위 디버그 로그 (기본: false)
    """

    schema_registry: str
    flatten: bool = False
    schema_id_size: int = MAX_SCHEMA_ID_SIZE
    registry_timeout: float = 30.0
    registry_username: str | None = None
    registry_password: str | None = None  # 보안상 환경변수 권장
    debug_mode: bool = False

    model_config = yaml_settings("SLS_AVRO_")

    @field_validator("schema_id_size")
    @classmethod
    def _reset_out_of_range_size(cls, value: int) -> int:
        return normalize_schema_id_size(value)

    @field_validator("registry_timeout")
    @classmethod
    def _positive_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("registry_timeout must be positive")
        return value

    @property
    def registry_auth(self) -> tuple[str, str] | None:
        """Basic 인증 튜플 (username이 없으면 None)"""
        if not self.registry_username:
            return None
        return (self.registry_username, self.registry_password or "")


class LoggingSettings(BaseSettings):
    """로깅 설정 (환경변수 기반)

    환경변수 오버라이드:
        LOG_LEVEL: 로깅 레벨 (기본: INFO)
        LOG_TO_FILE: 파일 로깅 여부 (기본: false)
        LOG_DIR: 로그 디렉토리 (기본: logs)
    """

    level: str = "INFO"
    to_file: bool = False
    dir: str = "logs"

    model_config = yaml_settings("LOG_")


# ========================================
# 설정 인스턴스 (싱글톤)
# ========================================
# 코덱 설정은 schema_registry가 필수이므로 필요할 때 CodecSettings()로 생성합니다.

logging_settings = LoggingSettings()
