"""
프레임 Avro blob 디코딩 CLI (디버깅용)

각 파일을 blob 1건으로 읽어(또는 --hex면 줄마다 16진수 blob 1건) 디코딩하고
출력 레코드를 JSON Lines로 stdout에 씁니다. 건너뛴 blob은 로그로만 남깁니다.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from collections.abc import Iterator, Sequence
from decimal import Decimal
from pathlib import Path
from typing import Any, BinaryIO

import orjson
from pydantic import ValidationError

from sls_avro.application.codec import SlsAvroCodec
from sls_avro.common.logger import CodecLogger
from sls_avro.config.settings import CodecSettings
from sls_avro.infra.messaging.avro.schema_cache import SchemaFetcher

logger = CodecLogger.get_logger("cli", "app")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sls-avro",
        description="스키마 레지스트리 기반 프레임 Avro blob 디코더",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
사용 예시:
  # 바이너리 파일 하나 = blob 하나
  python -m sls_avro decode --registry http://registry:8081/schemas/ids/ message.bin

  # 16진수 blob 목록 (한 줄에 하나), 평탄화 활성화
  python -m sls_avro decode --hex --flatten blobs.txt

  # 레지스트리 URL은 SLS_AVRO_SCHEMA_REGISTRY 환경변수로도 지정 가능
        """,
    )

    subparsers = parser.add_subparsers(dest="command", required=True, help="사용 가능한 명령어")

    decode = subparsers.add_parser("decode", help="blob 파일 디코딩")
    decode.add_argument("files", nargs="+", help="입력 파일 ('-'는 stdin)")
    decode.add_argument("--registry", help="스키마 레지스트리 URL (ID가 끝에 붙음)")
    decode.add_argument(
        "--flatten", action="store_true", default=None, help="그룹 필드 평탄화"
    )
    decode.add_argument("--schema-id-size", type=int, help="스키마 ID 바이트 수 (기본 4)")
    decode.add_argument("--timeout", type=float, help="레지스트리 타임아웃 (초)")
    decode.add_argument("--hex", action="store_true", help="입력을 줄 단위 16진수 blob으로 해석")
    decode.add_argument("--debug", action="store_true", default=None, help="메시지 단위 디버그 로그")
    return parser


def load_settings(args: argparse.Namespace) -> CodecSettings:
    """명령행 옵션 > 환경변수 > 기본값 순으로 설정 구성"""
    overrides = {
        "schema_registry": args.registry,
        "flatten": args.flatten,
        "schema_id_size": args.schema_id_size,
        "registry_timeout": args.timeout,
        "debug_mode": args.debug,
    }
    return CodecSettings(**{k: v for k, v in overrides.items() if v is not None})


def _open_input(name: str) -> BinaryIO:
    if name == "-":
        return sys.stdin.buffer
    return Path(name).open("rb")


def iter_blobs(files: Sequence[str], hex_lines: bool) -> Iterator[bytes]:
    for name in files:
        stream = _open_input(name)
        try:
            if not hex_lines:
                yield stream.read()
                continue
            for line_no, line in enumerate(stream, start=1):
                text = line.strip()
                if not text:
                    continue
                try:
                    yield bytes.fromhex(text.decode("ascii"))
                except ValueError:
                    logger.warning(f"16진수가 아닌 줄 건너뜀: {name}:{line_no}")
        finally:
            if stream is not sys.stdin.buffer:
                stream.close()


def _json_default(obj: Any) -> Any:
    match obj:
        case bytes() | bytearray():
            return obj.hex()
        case Decimal():
            return str(obj)
        case _:
            raise TypeError(f"Type is not JSON serializable: {type(obj).__name__}")


async def run_decode(
    args: argparse.Namespace,
    out: BinaryIO,
    fetcher: SchemaFetcher | None = None,
) -> tuple[int, int]:
    """
    decode 명령 실행

    Returns:
        (출력 레코드 수, 건너뛴 blob 수)
    """
    settings = load_settings(args)
    emitted = skipped = 0

    async with SlsAvroCodec.from_settings(settings, fetcher=fetcher) as codec:
        for blob in iter_blobs(args.files, args.hex):
            result = await codec.decode(blob)
            if not result.ok:
                skipped += 1
                continue
            for record in result.records:
                out.write(orjson.dumps(record, default=_json_default) + b"\n")
                emitted += 1

    out.flush()
    logger.info(f"디코딩 완료: records={emitted}, skipped={skipped}")
    return emitted, skipped


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        asyncio.run(run_decode(args, sys.stdout.buffer))
    except ValidationError as e:
        logger.error(f"설정 오류: {e}")
        return 2
    except OSError as e:
        logger.error(f"입력 파일 오류: {e}")
        return 1
    return 0
