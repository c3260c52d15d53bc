"""코덱 컴포넌트 로거

컴포넌트마다 "<name>.<component>" 표준 로거를 하나씩 두고,
실제 출력(stderr, 일자별 파일)은 로거별 QueueListener 스레드가 맡습니다.
디코딩 경로에서는 큐에 넣는 비용만 듭니다.

    logger = CodecLogger.get_logger("schema_cache", "avro")
    logger.info("스키마 캐시 저장: id=7")
    # 2025-02-15 12:00:00,000 INFO schema_cache.avro [avro] 스키마 캐시 저장: id=7
"""

from __future__ import annotations

import atexit
import logging
import queue
import sys
import threading
from datetime import datetime
from logging.handlers import QueueHandler, QueueListener, TimedRotatingFileHandler
from pathlib import Path
from typing import Any, ClassVar

from sls_avro.config.settings import logging_settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s [%(component)s] %(message)s"


class CodecLogger:
    """
    큐 기반 비차단 컴포넌트 로거

    같은 (name, component)로 get_logger를 다시 호출하면 기존 인스턴스를 돌려주므로
    리스너 스레드가 모듈 import마다 늘어나지 않습니다.
    """

    _instances: ClassVar[dict[tuple[str, str | None], CodecLogger]] = {}
    _instances_lock: ClassVar[threading.Lock] = threading.Lock()

    @classmethod
    def get_logger(cls, name: str, component: str | None = None, **kwargs: Any) -> CodecLogger:
        key = (name, component)
        with cls._instances_lock:
            instance = cls._instances.get(key)
            if instance is None or instance.closed:
                instance = cls(name, component, **kwargs)
                cls._instances[key] = instance
            return instance

    @classmethod
    def close_all(cls) -> None:
        """모든 리스너를 멈추고 남은 레코드를 flush (프로세스 종료 시 호출)"""
        with cls._instances_lock:
            instances = list(cls._instances.values())
            cls._instances.clear()
        for instance in instances:
            instance.close()

    def __init__(
        self,
        name: str,
        component: str | None = None,
        level: int | str | None = None,
        log_to_file: bool | None = None,
        log_to_console: bool = True,
        log_dir: str | None = None,
        rotation: str = "midnight",
    ) -> None:
        """
        Args:
            name: 로거 이름
            component: 컴포넌트 태그 (파일 로그는 컴포넌트별 디렉토리에 저장)
            level: 로깅 레벨 (기본: LOG_LEVEL)
            log_to_file: 파일 출력 여부 (기본: LOG_TO_FILE)
            log_to_console: stderr 출력 여부 (stdout은 CLI 레코드 출력용)
            log_dir: 로그 디렉토리 (기본: LOG_DIR)
            rotation: 파일 로테이션 주기
        """
        self.name = name
        self.component = component
        self.log_dir = Path(log_dir or logging_settings.dir)
        self.closed = False

        self.logger = logging.getLogger(f"{name}.{component}" if component else name)
        self.logger.setLevel(level or logging_settings.level.upper())
        self.logger.propagate = False
        self.logger.handlers.clear()

        sinks = self._build_sinks(
            log_to_console=log_to_console,
            log_to_file=logging_settings.to_file if log_to_file is None else log_to_file,
            rotation=rotation,
        )

        # 무제한 큐: 디코딩 경로에서 queue.Full로 막히지 않도록
        log_queue: queue.Queue[logging.LogRecord] = queue.Queue()
        self._queue_handler = QueueHandler(log_queue)
        self.logger.addHandler(self._queue_handler)
        self._listener = QueueListener(log_queue, *sinks, respect_handler_level=True)
        self._listener.start()

    def _build_sinks(
        self, *, log_to_console: bool, log_to_file: bool, rotation: str
    ) -> list[logging.Handler]:
        formatter = logging.Formatter(LOG_FORMAT)
        sinks: list[logging.Handler] = []

        if log_to_console:
            sinks.append(logging.StreamHandler(sys.stderr))

        if log_to_file:
            path = self.log_path()
            path.parent.mkdir(parents=True, exist_ok=True)
            sinks.append(TimedRotatingFileHandler(path, when=rotation, backupCount=7, encoding="utf-8"))

        for sink in sinks:
            sink.setFormatter(formatter)
        return sinks

    def log_path(self) -> Path:
        """{log_dir}/{component}/{name}_{YYYY-MM-DD}.log"""
        today = datetime.now().strftime("%Y-%m-%d")
        directory = self.log_dir / self.component if self.component else self.log_dir
        return directory / f"{self.name}_{today}.log"

    def _log(self, level: int, msg: str, exc_info: Any = None, **fields: Any) -> None:
        # fields는 LogRecord 속성으로 붙음 (message, name 등 예약어는 쓸 수 없음)
        self.logger.log(
            level, msg, exc_info=exc_info, extra={"component": self.component or "main", **fields}
        )

    def debug(self, msg: str, **fields: Any) -> None:
        self._log(logging.DEBUG, msg, **fields)

    def info(self, msg: str, **fields: Any) -> None:
        self._log(logging.INFO, msg, **fields)

    def warning(self, msg: str, **fields: Any) -> None:
        self._log(logging.WARNING, msg, **fields)

    def error(self, msg: str, **fields: Any) -> None:
        self._log(logging.ERROR, msg, **fields)

    def close(self) -> None:
        """리스너를 멈추고 핸들러를 닫습니다 (여러 번 호출해도 안전)."""
        if self.closed:
            return
        self.closed = True
        self._listener.stop()
        self.logger.removeHandler(self._queue_handler)
        for sink in self._listener.handlers:
            sink.close()


atexit.register(CodecLogger.close_all)
