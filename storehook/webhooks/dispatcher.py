"""HTTP dispatcher for rendered webhook requests.

Builds the header list, sends the request over a single-use transport and
classifies the raw response. There is no retry: one failed send is final
for that hook and event.
"""

import re
from typing import Any

import structlog

from storehook.webhooks.models import DispatchOutcome, Hook, HookHeader, decode_headers
from storehook.webhooks.security import AUTHORIZATION_HEADER, auth_header_for_hook
from storehook.webhooks.transport import HTTP_VERSION, HttpxTransport, Transport, TransportFactory

logger = structlog.get_logger(__name__)

CONNECTION_FAILED_MESSAGE = "Cannot connect to server. Please try again later."

_STATUS_LINE = re.compile(r"HTTP/\d(?:\.\d)?\s(\d+)")


def is_success(code: int) -> bool:
    """True for 2xx status codes."""
    return 200 <= code < 300


def parse_status_code(raw_response: str) -> int | None:
    """Extract the status code from the head of a raw HTTP response.

    Args:
        raw_response: Full response text.

    Returns:
        Status code, or None if no status line is found.
    """
    head = raw_response.split("\r\n\r\n", 1)[0]
    match = _STATUS_LINE.search(head)
    if match is None:
        return None
    return int(match.group(1))


def classify_response(raw_response: str | None) -> DispatchOutcome:
    """Classify a raw response as success or failure.

    Args:
        raw_response: Full response text, possibly empty.

    Returns:
        Outcome carrying the raw response.
    """
    if not raw_response:
        return DispatchOutcome(success=False, response="", message=CONNECTION_FAILED_MESSAGE)

    code = parse_status_code(raw_response)
    if code is not None and is_success(code):
        return DispatchOutcome(success=True, response=raw_response)

    return DispatchOutcome(
        success=False,
        response=raw_response,
        message=CONNECTION_FAILED_MESSAGE,
    )


def build_header_lines(
    headers: list[HookHeader] | list[dict[str, Any]] | str | None,
    auth_header: str,
    content_type: str | None,
) -> list[str]:
    """Serialize request headers as ``"Name: value"`` lines.

    Args:
        headers: Custom headers, structured or JSON-encoded.
        auth_header: Authorization value ("" for none).
        content_type: Content-Type value (None or "" for none).

    Returns:
        Header lines in send order: custom, Authorization, Content-Type.
    """
    lines = [f"{h.name.strip()}: {h.value.strip()}" for h in decode_headers(headers)]

    if auth_header:
        lines.append(f"{AUTHORIZATION_HEADER}: {auth_header}")

    if content_type:
        lines.append(f"Content-Type: {content_type}")

    return lines


class HttpDispatcher:
    """Sends webhook requests and classifies their responses."""

    def __init__(self, transport_factory: TransportFactory | None = None) -> None:
        """Initialize the dispatcher.

        Args:
            transport_factory: Creates one transport per send
                (HttpxTransport if not provided).
        """
        self._transport_factory: TransportFactory = transport_factory or HttpxTransport
        self._logger = logger.bind(component="http_dispatcher")

    async def send(
        self,
        headers: list[HookHeader] | list[dict[str, Any]] | str | None,
        auth_header: str,
        content_type: str | None,
        url: str,
        body: str,
        method: str | None = None,
    ) -> DispatchOutcome:
        """Send one request.

        Args:
            headers: Custom headers, structured or JSON-encoded.
            auth_header: Authorization value ("" for none).
            content_type: Content-Type value.
            url: Target URL.
            body: Request body.
            method: HTTP verb (GET when empty).

        Returns:
            Outcome of the send. Transport errors are reported as failures,
            never raised.
        """
        method = method or "GET"
        transport: Transport | None = None

        try:
            header_lines = build_header_lines(headers, auth_header, content_type)
            transport = self._transport_factory()
            await transport.write(method, url, HTTP_VERSION, header_lines, body)
            raw_response = await transport.read()
            outcome = classify_response(raw_response)
        except Exception as e:
            self._logger.warning(
                "transport_error",
                url=url,
                method=method,
                error=str(e),
            )
            outcome = DispatchOutcome(success=False, message=str(e))
        finally:
            if transport is not None:
                await transport.close()

        self._logger.debug(
            "request_sent",
            url=url,
            method=method,
            success=outcome.success,
        )
        return outcome

    async def send_for_hook(self, hook: Hook, url: str, body: str) -> DispatchOutcome:
        """Send a rendered request using a hook's method, headers and credentials.

        Args:
            hook: Hook supplying method, headers, content type and auth.
            url: Rendered URL.
            body: Rendered body.

        Returns:
            Outcome of the send.
        """
        auth_header = auth_header_for_hook(hook, url)
        return await self.send(
            hook.headers,
            auth_header,
            hook.content_type,
            url,
            body,
            hook.method,
        )
