from typing import AsyncIterator, Iterable, List

import httpx
import pytest

from ollamakit.domain.errors import HttpError, ModelNotFoundError, NetworkError, SerializationError
from ollamakit.domain.models import ChatResponse, GenerateResponse, StatusResponse
from ollamakit.infrastructure.ollama.decoder import (
    UNREADABLE_BODY,
    Framing,
    decode_stream,
    decode_unary,
    ensure_success,
    iter_json_lines,
    iter_sse_payloads,
    select_framing,
)
from ollamakit.infrastructure.ollama.transport import RawResponse, RawStreamHandle


def _raw(status: int, body, reason: str = "") -> RawResponse:
    return RawResponse(
        method="POST",
        path="/api/generate",
        status_code=status,
        reason=reason,
        headers={"content-type": "application/json"},
        body=body.encode("utf-8") if isinstance(body, str) else body,
    )


async def _aiter(items: Iterable[str]) -> AsyncIterator[str]:
    for item in items:
        yield item


async def _collect(agen) -> List:
    return [item async for item in agen]


def _handle(chunks: Iterable[str], content_type="application/x-ndjson", status=200, broken=False):
    async def _body():
        for chunk in chunks:
            yield chunk.encode("utf-8")
        if broken:
            raise httpx.ReadError("connection reset")
    response = httpx.Response(status, content=_body(), headers={"content-type": content_type})
    return RawStreamHandle(response, method="POST", path="/api/chat")


# ---------------- Unary ----------------

def test_decode_unary_success():
    resp = decode_unary(_raw(200, '{"model": "m", "response": "hello", "done": true}'), GenerateResponse)
    assert resp.response == "hello"
    assert resp.done is True


def test_decode_unary_is_idempotent():
    raw = _raw(200, '{"model": "m", "response": "same"}')
    assert decode_unary(raw, GenerateResponse) == decode_unary(raw, GenerateResponse)


def test_non_2xx_is_an_http_error_even_if_body_looks_valid():
    raw = _raw(500, '{"model": "m", "response": "x"}', reason="Internal Server Error")
    with pytest.raises(HttpError) as excinfo:
        decode_unary(raw, GenerateResponse)
    err = excinfo.value
    assert err.status_code == 500
    assert err.message == "HTTP 500: Internal Server Error"
    assert err.response_body == '{"model": "m", "response": "x"}'


def test_unreadable_error_body_uses_placeholder():
    with pytest.raises(HttpError) as excinfo:
        ensure_success(_raw(502, None, reason="Bad Gateway"))
    assert excinfo.value.response_body == UNREADABLE_BODY


def test_404_on_model_scoped_call_is_model_not_found():
    raw = _raw(404, '{"error": "model \\"nope\\" not found"}', reason="Not Found")
    with pytest.raises(ModelNotFoundError) as excinfo:
        decode_unary(raw, GenerateResponse, model_name="nope")
    assert excinfo.value.model_name == "nope"


def test_404_without_model_scope_stays_http_error():
    with pytest.raises(HttpError) as excinfo:
        ensure_success(_raw(404, "not found", reason="Not Found"))
    assert excinfo.value.status_code == 404


def test_malformed_success_body_is_serialization_error():
    with pytest.raises(SerializationError) as excinfo:
        decode_unary(_raw(200, "{not json"), GenerateResponse)
    assert excinfo.value.raw_excerpt == "{not json"
    assert excinfo.value.cause is not None


def test_long_bodies_are_excerpted():
    body = '{"model": ' + "9" * 500 + "}"
    with pytest.raises(SerializationError) as excinfo:
        decode_unary(_raw(200, body), GenerateResponse)
    assert len(excinfo.value.raw_excerpt) == 200


def test_empty_body_with_empty_success_is_canonical_success():
    ok = lambda: StatusResponse(success=True)  # noqa: E731
    assert decode_unary(_raw(200, ""), StatusResponse, empty_success=ok) == StatusResponse(success=True)
    assert decode_unary(_raw(200, "  \n"), StatusResponse, empty_success=ok).success
    with pytest.raises(SerializationError):
        decode_unary(_raw(200, ""), StatusResponse)


# ---------------- Framing ----------------

@pytest.mark.parametrize("content_type,expected", [
    ("text/event-stream", Framing.SSE),
    ("text/event-stream; charset=utf-8", Framing.SSE),
    ("application/x-ndjson", Framing.JSON_LINES),
    ("application/json", Framing.JSON_LINES),
    (None, Framing.JSON_LINES),
])
def test_select_framing(content_type, expected):
    assert select_framing(content_type) is expected


@pytest.mark.asyncio
async def test_json_lines_skip_blank_lines():
    units = await _collect(iter_json_lines(_aiter(['{"a":1}', "", "   ", '{"a":2}'])))
    assert units == ['{"a":1}', '{"a":2}']


@pytest.mark.asyncio
async def test_sse_joins_multiline_data_and_ignores_other_fields():
    lines = [
        ": keep-alive comment",
        "event: message",
        "id: 1",
        "retry: 1000",
        'data: {"a":',
        "data: 1}",
        "",
        'data: {"a":2}',
        "",
    ]
    assert await _collect(iter_sse_payloads(_aiter(lines))) == ['{"a":\n1}', '{"a":2}']


@pytest.mark.asyncio
async def test_sse_done_sentinel_flushes_and_stops():
    lines = ['data: {"a":1}', "data: [DONE]", 'data: {"a":2}', ""]
    assert await _collect(iter_sse_payloads(_aiter(lines))) == ['{"a":1}']


@pytest.mark.asyncio
async def test_sse_flushes_pending_event_at_end_of_input():
    assert await _collect(iter_sse_payloads(_aiter(['data: {"a":1}']))) == ['{"a":1}']


# ---------------- Streams ----------------

@pytest.mark.asyncio
async def test_decode_stream_json_lines_in_wire_order():
    handle = _handle([
        '{"model":"m","message":{"role":"assistant","content":"Hel"}}\n',
        '\n',
        '{"model":"m","message":{"role":"assistant","content":"lo"},"done":true}\n',
    ])
    async with handle:
        frames = await _collect(decode_stream(handle, ChatResponse))
    assert [f.index for f in frames] == [0, 1]
    assert "".join(f.unwrap().message.content for f in frames) == "Hello"
    assert frames[-1].value.done


@pytest.mark.asyncio
async def test_decode_stream_sse():
    handle = _handle(
        ['data: {"model":"m","response":"a"}\n\n', 'data: {"model":"m","response":"b"}\n\n', "data: [DONE]\n\n"],
        content_type="text/event-stream",
    )
    async with handle:
        frames = await _collect(decode_stream(handle, GenerateResponse))
    assert [f.value.response for f in frames] == ["a", "b"]


@pytest.mark.asyncio
async def test_malformed_unit_ends_stream_with_serialization_error():
    handle = _handle([
        '{"model":"m","response":"a"}\n',
        '{"model":"m","response":"b"}\n',
        "not json\n",
        '{"model":"m","response":"never"}\n',
    ])
    async with handle:
        frames = await _collect(decode_stream(handle, GenerateResponse))
    assert len(frames) == 3
    assert [f.ok for f in frames] == [True, True, False]
    err = frames[-1].error
    assert isinstance(err, SerializationError)
    assert err.position == 2
    assert frames[-1].index == 2


@pytest.mark.asyncio
async def test_error_status_on_stream_is_single_error_frame():
    handle = _handle(['{"error":"model \\"x\\" not found"}'], content_type="application/json", status=404)
    async with handle:
        frames = await _collect(decode_stream(handle, ChatResponse, model_name="x"))
    assert len(frames) == 1
    assert isinstance(frames[0].error, ModelNotFoundError)


@pytest.mark.asyncio
async def test_broken_body_ends_stream_with_network_error():
    handle = _handle(['{"model":"m","response":"a"}\n'], broken=True)
    async with handle:
        frames = await _collect(decode_stream(handle, GenerateResponse))
    assert frames[0].value.response == "a"
    assert isinstance(frames[-1].error, NetworkError)
    assert frames[-1].index == 1
