#!/usr/bin/env python
# vim:fileencoding=UTF-8:ts=4:sw=4:sta:et:sts=4:ai

"""Response framing: plain JSON bodies or single Server-Sent-Events frames."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Dict, Optional

from starlette.responses import Response

JSON_MEDIA_TYPE = "application/json"
EVENT_STREAM_MEDIA_TYPE = "text/event-stream"
SSE_EVENT_PREFIX = "event: message"

_SSE_DATA_PATTERN = re.compile(r"data: (.+)")


@dataclass
class FramedResponse:
    body: str
    media_type: str
    streamed: bool


def format_sse_event(data: str, event: str = "message") -> str:
    return f"event: {event}\ndata: {data}\n\n"


def is_sse_frame(text: str) -> bool:
    return text.startswith(SSE_EVENT_PREFIX)


def extract_sse_data(text: str) -> Optional[str]:
    """Return the payload of the first ``data:`` line, or None."""
    match = _SSE_DATA_PATTERN.search(text)
    if match is None:
        return None
    return match.group(1).strip()


def decode_body(text: str) -> Dict[str, Any]:
    """Parse a response body in either framing into the envelope dict."""
    if is_sse_frame(text):
        data = extract_sse_data(text)
        if data is None:
            raise ValueError("SSE frame carries no data line")
        return json.loads(data)
    return json.loads(text)


class ResponseFramer(object):
    """Serialise envelopes for the negotiated transport.

    Streaming is a fixed server-side setting; it only takes effect when the
    client also lists ``text/event-stream`` in its Accept header. Each
    response is exactly one frame.
    """

    def __init__(self, streaming: bool = True):
        self._streaming = streaming

    @property
    def streaming(self) -> bool:
        return self._streaming

    def negotiate(self, accept: Optional[str]) -> bool:
        if not self._streaming or not accept:
            return False
        accepted = [part.split(";", 1)[0].strip().lower() for part in accept.split(",")]
        return EVENT_STREAM_MEDIA_TYPE in accepted

    def frame(self, envelope: Dict[str, Any], accept: Optional[str] = None) -> FramedResponse:
        payload = json.dumps(envelope, separators=(",", ":"))
        if self.negotiate(accept):
            return FramedResponse(format_sse_event(payload), EVENT_STREAM_MEDIA_TYPE, streamed=True)
        return FramedResponse(payload, JSON_MEDIA_TYPE, streamed=False)

    def to_response(self, envelope: Dict[str, Any], accept: Optional[str] = None, status_code: int = 200) -> Response:
        framed = self.frame(envelope, accept)
        headers = {"Cache-Control": "no-cache"} if framed.streamed else None
        return Response(framed.body, status_code=status_code, media_type=framed.media_type, headers=headers)
