#!/usr/bin/env python
# vim:fileencoding=UTF-8:ts=4:sw=4:sta:et:sts=4:ai

"""Probe which method-naming conventions a server accepts.

Each catalogue entry is sent as its own request, one after another, and
every attempt yields exactly one report line. A failure on one variant
never stops the run.

The success check is deliberately coarse: a response counts as
successful when its payload text does not contain ``error``. The
structural check of the envelope's ``error`` member is recorded next to
it in :attr:`ProbeResult.has_error_field`.
"""

from __future__ import annotations

import argparse
import json
import logging
import uuid
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

import requests

from .config_loader import ProbeConfig, configure_logging, load_probe_config_from_env
from .framing import EVENT_STREAM_MEDIA_TYPE, JSON_MEDIA_TYPE, extract_sse_data, is_sse_frame
from .mcp_protocol import CALL_TOOL, JSONRPC_VERSION, LIST_TOOLS

log = logging.getLogger(__name__)

STREAM_ID_HEADER = "X-MCP-Stream-Id"
ACCEPT_HEADER = f"{JSON_MEDIA_TYPE}, {EVENT_STREAM_MEDIA_TYPE}"
CALL_TOOL_TARGET = "echo"

PARAMS_DIRECT = "direct"
PARAMS_CALL_TOOL = "call_tool"


@dataclass(frozen=True)
class ProbeVariant:
    method: str
    params_shape: str = PARAMS_DIRECT

    def build_params(self) -> Dict[str, Any]:
        message = f"Hello from {self.method} format!"
        if self.params_shape == PARAMS_CALL_TOOL:
            return {"name": CALL_TOOL_TARGET, "arguments": {"message": message}}
        return {"message": message}


DEFAULT_VARIANTS = (
    ProbeVariant("Echo"),
    ProbeVariant("echo"),
    ProbeVariant("manual-echo"),
    ProbeVariant("EchoTool.Echo"),
    ProbeVariant("tools/Echo"),
    ProbeVariant(CALL_TOOL, PARAMS_CALL_TOOL),
)


@dataclass
class ProbeResult:
    method: str
    status_code: Optional[int] = None
    body: str = ""
    payload: Optional[Dict[str, Any]] = None
    successful: bool = False
    error: Optional[str] = None

    @property
    def has_error_field(self) -> bool:
        return isinstance(self.payload, dict) and "error" in self.payload

    def report_line(self) -> str:
        if self.error is not None and self.status_code is None:
            return f"[FAILED ] {self.method}: {self.error}"
        if self.successful:
            return f"[SUCCESS] {self.method}: HTTP {self.status_code}, this method format works"
        detail = self.error
        if detail is None and self.has_error_field:
            detail = str(self.payload["error"].get("message", self.payload["error"]))
        if detail is None:
            detail = "response mentions an error"
        return f"[FAILED ] {self.method}: HTTP {self.status_code}, {detail}"


def build_request(method: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    request: Dict[str, Any] = {
        "jsonrpc": JSONRPC_VERSION,
        "id": str(uuid.uuid4()),
        "method": method,
    }
    if params is not None:
        request["params"] = params
    return request


def looks_successful(text: str) -> bool:
    return "error" not in text


class ProbeClient:
    """Send catalogue variants to one endpoint and classify the replies."""

    def __init__(self, config: ProbeConfig, session=None, logger: Optional[logging.Logger] = None):
        self.config = config
        self._log = logger or log
        self._session = session if session is not None else requests.Session()
        if not config.verify_tls:
            self._log.warning("TLS certificate verification disabled; use only against local test servers")
        self._session.verify = config.verify_tls

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> "ProbeClient":
        return self

    def __exit__(self, *_: object) -> None:
        self.close()

    def probe_list_tools(self) -> ProbeResult:
        return self.send(LIST_TOOLS, build_request(LIST_TOOLS))

    def probe_variant(self, variant: ProbeVariant) -> ProbeResult:
        return self.send(variant.method, build_request(variant.method, variant.build_params()))

    def run(self, variants: Sequence[ProbeVariant] = DEFAULT_VARIANTS) -> List[ProbeResult]:
        results: List[ProbeResult] = []
        for variant in variants:
            self._log.info("Testing method format: %s", variant.method)
            results.append(self.probe_variant(variant))
        return results

    def send(self, label: str, request: Dict[str, Any]) -> ProbeResult:
        body = json.dumps(request)
        headers = {
            "Content-Type": JSON_MEDIA_TYPE,
            "Accept": ACCEPT_HEADER,
            STREAM_ID_HEADER: str(uuid.uuid4()),
        }
        self._log.debug("Sending request: %s", body)
        try:
            response = self._session.post(
                self.config.server_url,
                data=body,
                headers=headers,
                timeout=self.config.timeout_seconds,
            )
        except requests.RequestException as exc:
            self._log.warning("Request for %s failed: %s", label, exc)
            return ProbeResult(method=label, error=f"{type(exc).__name__}: {exc}")

        result = ProbeResult(method=label, status_code=response.status_code, body=response.text)
        self._log.info("Status for %s: %s", label, response.status_code)
        if not 200 <= response.status_code < 300:
            result.error = "request failed"
            self._try_parse(result, response.text)
            return result

        text = response.text
        if is_sse_frame(text):
            data = extract_sse_data(text)
            if data is None:
                result.error = "SSE frame without data line"
                return result
            self._try_parse(result, data)
            if result.payload is None:
                result.error = "unparsable SSE payload"
                return result
            result.successful = looks_successful(data)
            return result

        self._try_parse(result, text)
        result.successful = looks_successful(text)
        return result

    def _try_parse(self, result: ProbeResult, text: str) -> None:
        try:
            parsed = json.loads(text)
        except ValueError:
            self._log.debug("Payload for %s is not JSON: %r", result.method, text[:200])
            return
        if isinstance(parsed, dict):
            result.payload = parsed


def print_result(result: ProbeResult) -> None:
    print(result.report_line())
    if result.payload is not None:
        print(json.dumps(result.payload, indent=2))
    elif result.body:
        print(f"Response body: {result.body}")


def main(argv: Optional[Sequence[str]] = None) -> int:
    defaults = load_probe_config_from_env()
    parser = argparse.ArgumentParser(
        description="Probe which method-name formats an MCP endpoint accepts"
    )
    parser.add_argument("--url", default=defaults.server_url, help="MCP endpoint URL")
    parser.add_argument(
        "--insecure",
        action="store_true",
        help="Skip TLS certificate verification (local testing only)",
    )
    parser.add_argument("--timeout", type=float, default=defaults.timeout_seconds, help="Request timeout in seconds")
    parser.add_argument("--skip-list-tools", action="store_true", help="Do not send list_tools first")
    parser.add_argument("--log-level", default="WARNING", help="Logging level")
    args = parser.parse_args(argv)

    configure_logging(args.log_level.upper())
    config = ProbeConfig(
        server_url=args.url,
        verify_tls=defaults.verify_tls and not args.insecure,
        timeout_seconds=args.timeout,
    )

    print("MCP method format probe")
    print("=" * 60)
    print("Target URL:", config.server_url)

    with ProbeClient(config) as client:
        if not args.skip_list_tools:
            print()
            print(f"Testing {LIST_TOOLS} method...")
            print_result(client.probe_list_tools())

        results = client.run(DEFAULT_VARIANTS)

    for result in results:
        print()
        print("Testing method format:", result.method)
        print_result(result)

    print()
    print("=" * 60)
    working = [result.method for result in results if result.successful]
    print(f"{len(working)} of {len(results)} method formats accepted: {', '.join(working) or '(none)'}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
