from __future__ import annotations

import io
from decimal import Decimal
from pathlib import Path

import orjson
import pytest

from sls_avro.cli import _json_default, build_parser, iter_blobs, load_settings, main, run_decode
from tests.factory_builders import (
    METRICS_SCHEMA,
    FakeRegistryClient,
    build_blob,
    build_metrics_datum,
    build_registry_body,
    encode_datum,
)


@pytest.fixture(autouse=True)
def _clear_codec_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in (
        "SLS_AVRO_SCHEMA_REGISTRY",
        "SLS_AVRO_FLATTEN",
        "SLS_AVRO_SCHEMA_ID_SIZE",
        "SLS_AVRO_DEBUG_MODE",
    ):
        monkeypatch.delenv(key, raising=False)


def _metrics_blob(schema_id: int = 1, **overrides) -> bytes:
    return build_blob(schema_id, encode_datum(METRICS_SCHEMA, build_metrics_datum(**overrides)))


def test_cli_options_override_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SLS_AVRO_SCHEMA_REGISTRY", "http://env/")
    monkeypatch.setenv("SLS_AVRO_SCHEMA_ID_SIZE", "2")
    args = build_parser().parse_args(["decode", "--registry", "http://cli/", "--flatten", "x.bin"])

    settings = load_settings(args)

    assert settings.schema_registry == "http://cli/"
    assert settings.flatten is True
    # 지정하지 않은 옵션은 환경변수 값 유지
    assert settings.schema_id_size == 2


@pytest.mark.asyncio
async def test_run_decode_writes_json_lines(tmp_path: Path) -> None:
    first = tmp_path / "first.bin"
    second = tmp_path / "second.bin"
    broken = tmp_path / "broken.bin"
    first.write_bytes(_metrics_blob(host="a"))
    second.write_bytes(_metrics_blob(host="b"))
    broken.write_bytes(b"\x07garbage")

    args = build_parser().parse_args(
        ["decode", "--registry", "http://r/", str(first), str(broken), str(second)]
    )
    out = io.BytesIO()
    fake = FakeRegistryClient({1: build_registry_body(METRICS_SCHEMA)})

    emitted, skipped = await run_decode(args, out, fetcher=fake)

    lines = [orjson.loads(line) for line in out.getvalue().splitlines()]
    assert (emitted, skipped) == (2, 1)
    assert [line["host"] for line in lines] == ["a", "b"]
    assert fake.calls == [1]


@pytest.mark.asyncio
async def test_run_decode_hex_lines_with_flatten(tmp_path: Path) -> None:
    source = tmp_path / "blobs.txt"
    source.write_text(
        "\n".join([_metrics_blob().hex(), "", "zz-not-hex", _metrics_blob(host="db").hex()]) + "\n"
    )
    args = build_parser().parse_args(
        ["decode", "--registry", "http://r/", "--hex", "--flatten", str(source)]
    )
    out = io.BytesIO()

    emitted, skipped = await run_decode(
        args, out, fetcher=FakeRegistryClient({1: build_registry_body(METRICS_SCHEMA)})
    )

    lines = [orjson.loads(line) for line in out.getvalue().splitlines()]
    assert (emitted, skipped) == (4, 0)
    assert [(line["host"], line["es_subindex"]) for line in lines] == [
        ("web-1", "gauges"),
        ("web-1", "counters"),
        ("db", "gauges"),
        ("db", "counters"),
    ]


def test_iter_blobs_reads_whole_file_as_one_blob(tmp_path: Path) -> None:
    path = tmp_path / "raw.bin"
    path.write_bytes(b"\x00\x00\x00\x00\x01\n\nrest")

    assert list(iter_blobs([str(path)], hex_lines=False)) == [b"\x00\x00\x00\x00\x01\n\nrest"]


def test_json_default_handles_bytes_and_decimal() -> None:
    assert _json_default(b"\x01\xff") == "01ff"
    assert _json_default(Decimal("1.50")) == "1.50"
    with pytest.raises(TypeError):
        _json_default(object())


def test_main_without_registry_returns_config_error(tmp_path: Path) -> None:
    path = tmp_path / "raw.bin"
    path.write_bytes(_metrics_blob())

    assert main(["decode", str(path)]) == 2


def test_main_with_missing_file_returns_io_error(tmp_path: Path) -> None:
    assert main(["decode", "--registry", "http://127.0.0.1:9/", str(tmp_path / "nope.bin")]) == 1
