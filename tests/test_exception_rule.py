from __future__ import annotations

import asyncio
from decimal import InvalidOperation

import aiohttp
import orjson
import pytest
from fastavro.schema import SchemaParseException, UnknownType

from sls_avro.common.exceptions.exception_rule import (
    EXPECTED_EXCEPTIONS,
    InvalidSchemaResponseError,
    SchemaNotFoundError,
    SchemaRegistryError,
    classify_exception,
)
from sls_avro.core.types import SkipReason, Skipped


def _json_error() -> orjson.JSONDecodeError:
    try:
        orjson.loads(b"{broken")
    except orjson.JSONDecodeError as e:
        return e
    raise AssertionError("orjson accepted invalid json")


@pytest.mark.parametrize(
    "err",
    [
        SchemaNotFoundError("schema id 3 not found"),
        SchemaRegistryError("API Error: HTTP 500"),
        InvalidSchemaResponseError("empty body"),
        aiohttp.ClientConnectionError("refused"),
        asyncio.TimeoutError(),
        ConnectionResetError("reset"),
        SchemaParseException("bad schema"),
        UnknownType("nope"),
        KeyError("type"),
    ],
)
def test_registry_errors_map_to_resolution_failure(err: BaseException) -> None:
    result = classify_exception(err, "registry")

    assert isinstance(result, Skipped)
    assert result.reason is SkipReason.RESOLUTION_FAILURE
    assert result.detail.startswith(type(err).__name__)


def test_json_decode_error_is_resolution_failure() -> None:
    result = classify_exception(_json_error(), "registry")

    assert isinstance(result, Skipped)
    assert result.reason is SkipReason.RESOLUTION_FAILURE


@pytest.mark.parametrize(
    "err",
    [
        EOFError(),
        IndexError("list index out of range"),
        ValueError("x"),
        OverflowError("date value out of range"),
        InvalidOperation(),
    ],
)
def test_decode_errors_map_to_decode_failure(err: BaseException) -> None:
    result = classify_exception(err, "decode")

    assert isinstance(result, Skipped)
    assert result.reason is SkipReason.DECODE_FAILURE


def test_detail_includes_message_when_present() -> None:
    result = classify_exception(SchemaRegistryError("HTTP 503"), "registry")

    assert isinstance(result, Skipped)
    assert result.detail == "SchemaRegistryError: HTTP 503"


def test_detail_is_type_name_for_empty_message() -> None:
    result = classify_exception(EOFError(), "decode")

    assert isinstance(result, Skipped)
    assert result.detail == "EOFError"


@pytest.mark.parametrize(
    ("err", "kind"),
    [
        (RuntimeError("unexpected"), "registry"),
        (RuntimeError("unexpected"), "decode"),
        (SchemaRegistryError("wrong kind"), "decode"),
        (EOFError(), "unknown-kind"),
    ],
)
def test_unmatched_exception_returns_none(err: BaseException, kind: str) -> None:
    assert classify_exception(err, kind) is None


def test_expected_exceptions_cover_every_rule() -> None:
    assert issubclass(SchemaNotFoundError, EXPECTED_EXCEPTIONS["registry"])
    assert issubclass(asyncio.TimeoutError, EXPECTED_EXCEPTIONS["registry"])
    assert issubclass(EOFError, EXPECTED_EXCEPTIONS["decode"])
    assert issubclass(OverflowError, EXPECTED_EXCEPTIONS["decode"])
    assert not issubclass(RuntimeError, EXPECTED_EXCEPTIONS["decode"])
