"""
HTTP engine: transport, retry policy, error mapping and response decoding.
"""

from .decoder import (
    Framing,
    build_http_error,
    decode_json,
    decode_stream,
    decode_unary,
    ensure_success,
    iter_json_lines,
    iter_sse_payloads,
    select_framing,
)
from .error_mapping import error_boundary, map_exception
from .retry import RetryPolicy
from .transport import RawResponse, RawStreamHandle, TransportExecutor

__all__ = [
    "Framing",
    "RawResponse",
    "RawStreamHandle",
    "RetryPolicy",
    "TransportExecutor",
    "build_http_error",
    "decode_json",
    "decode_stream",
    "decode_unary",
    "ensure_success",
    "error_boundary",
    "iter_json_lines",
    "iter_sse_payloads",
    "map_exception",
    "select_framing",
]
