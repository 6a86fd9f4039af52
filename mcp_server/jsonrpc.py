"""Newline-delimited JSON-RPC 2.0 over a pair of streams.

Each input line is one request; each response is written as one compact JSON
line and flushed. Requests are handled strictly one at a time: the next line
is not read until the previous response has been written.

A request without an ``id`` is a notification. It is still handed to the
handler, but nothing is ever written back for it.
"""

import asyncio
import json
import logging
import re
import sys
from dataclasses import dataclass, field
from typing import IO, Any, Awaitable, Callable, Dict, Optional, TextIO, Union

logger = logging.getLogger(__name__)

JSONRPC_VERSION = "2.0"

PARSE_ERROR = -32700
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602

RequestId = Union[int, str, None]

# Returned by a handler for methods that are acknowledgements only, so no
# response is written even when the request carried an id.
NO_RESPONSE = object()

# Used only when a line is not valid JSON but still names its id.
_ID_PATTERN = re.compile(r'"id"\s*:\s*(-?\d+|"(?:[^"\\]|\\.)*")')


class JSONRPCError(Exception):
    """Raised by a handler to answer with an error instead of a result."""

    def __init__(self, code: int, message: str):
        super().__init__(message)
        self.code = code
        self.message = message


class RequestParseError(JSONRPCError):
    def __init__(self, message: str, request_id: RequestId = None):
        super().__init__(PARSE_ERROR, message)
        self.request_id = request_id


def _valid_id(value: Any) -> RequestId:
    # bool is an int subclass but never a request id
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, str)):
        return value
    return None


def extract_id(line: str) -> RequestId:
    """Best-effort id of a line that failed to decode as a request."""
    try:
        payload = json.loads(line)
    except ValueError:
        match = _ID_PATTERN.search(line)
        if not match:
            return None
        try:
            return _valid_id(json.loads(match.group(1)))
        except ValueError:
            return None
    if isinstance(payload, dict):
        return _valid_id(payload.get("id"))
    return None


@dataclass(frozen=True)
class JSONRPCRequest:
    method: str
    id: RequestId = None
    params: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_notification(self) -> bool:
        return self.id is None

    @classmethod
    def parse(cls, line: str) -> "JSONRPCRequest":
        """Decode one request line.

        Raises:
            RequestParseError: the line is not a JSON object with a string
                ``method``. Carries whatever id could still be recovered.
        """
        try:
            payload = json.loads(line)
        except ValueError as e:
            raise RequestParseError(f"Parse error: {e}", extract_id(line)) from e

        if not isinstance(payload, dict):
            raise RequestParseError("Parse error: request must be a JSON object")

        request_id = _valid_id(payload.get("id"))
        method = payload.get("method")
        if not isinstance(method, str):
            raise RequestParseError("Parse error: missing method", request_id)

        params = payload.get("params")
        return cls(
            method=method,
            id=request_id,
            params=params if isinstance(params, dict) else {},
        )


def success_response(request_id: RequestId, result: Dict[str, Any]) -> Dict[str, Any]:
    return {"jsonrpc": JSONRPC_VERSION, "id": request_id, "result": result}


def error_response(request_id: RequestId, code: int, message: str) -> Dict[str, Any]:
    return {
        "jsonrpc": JSONRPC_VERSION,
        "id": request_id,
        "error": {"code": code, "message": message},
    }


def decode_line(line: Union[str, bytes]) -> str:
    """Text of one input line; bytes must be valid UTF-8.

    Raises:
        RequestParseError: the bytes do not decode. The id is recovered from
            a lossy decoding where possible.
    """
    if isinstance(line, str):
        return line
    try:
        return line.decode("utf-8")
    except UnicodeDecodeError as e:
        raise RequestParseError(
            f"Parse error: invalid UTF-8: {e}",
            extract_id(line.decode("utf-8", errors="replace")),
        ) from e


Handler = Callable[[JSONRPCRequest], Awaitable[Optional[Dict[str, Any]]]]


class JSONRPCServer:
    """Read-dispatch-write loop over a pair of streams.

    ``handler`` receives each decoded request and returns the ``result``
    object (None means an empty one), returns ``NO_RESPONSE``, or raises
    ``JSONRPCError``.

    Input is read as bytes whenever the stream offers them (stdin, or any
    ``TextIOWrapper`` through its ``buffer``), so an undecodable line turns
    into a parse error instead of ending the loop.
    """

    def __init__(
        self,
        handler: Handler,
        input_stream: Optional[IO] = None,
        output_stream: Optional[TextIO] = None,
    ):
        self.handler = handler
        input_stream = input_stream or sys.stdin
        self.input_stream = getattr(input_stream, "buffer", input_stream)
        self.output_stream = output_stream or sys.stdout

    async def run(self) -> None:
        """Serve until the input stream is closed."""
        loop = asyncio.get_running_loop()
        while True:
            line = await loop.run_in_executor(None, self.input_stream.readline)
            if not line:
                logger.debug("Input closed, stopping")
                return
            await self.process_line(line)

    async def process_line(self, line: Union[str, bytes]) -> Optional[Dict[str, Any]]:
        """Handle one line; returns the response written, if any."""
        line = line.strip()
        if not line:
            return None

        try:
            request = JSONRPCRequest.parse(decode_line(line))
        except RequestParseError as e:
            logger.warning("Unparseable request: %s", e.message)
            response = error_response(e.request_id, e.code, e.message)
            self._write(response)
            return response

        try:
            result = await self.handler(request)
        except JSONRPCError as e:
            logger.info("%s failed with %d: %s", request.method, e.code, e.message)
            response = error_response(request.id, e.code, e.message)
        else:
            if result is NO_RESPONSE:
                return None
            response = success_response(request.id, result or {})

        if request.is_notification:
            return None
        self._write(response)
        return response

    def _write(self, response: Dict[str, Any]) -> None:
        # ASCII escaping keeps lone surrogates from failing the encode
        self.output_stream.write(json.dumps(response, separators=(",", ":")) + "\n")
        self.output_stream.flush()
