"""HTTP tunnelling into the device through a bridge port forward.

Each call re-issues ``forward tcp:<host> tcp:<guest>`` and then performs
exactly one HTTP request against ``http://<ip>:<host>/<path>``. A device
has a single forwarding slot, so calls for different guest ports simply
overwrite each other's mapping. If several guest services are needed,
forward inside the device instead.
"""

from __future__ import annotations

import logging
import threading
import time
from enum import Enum
from typing import TYPE_CHECKING, Any, Optional, Protocol, Union

import requests

from .config import FORWARD_TIMEOUT_S
from .interfaces import ErrorKind, HttpResult

if TYPE_CHECKING:
    from .session import DeviceSession

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"
BODY_CHUNK_SIZE = 1024


class HttpMethod(Enum):
    GET = "GET"
    POST = "POST"

    @classmethod
    def parse(cls, method: Union[str, "HttpMethod"]) -> Optional["HttpMethod"]:
        """Return the member for ``method`` or None if it is not supported."""
        if isinstance(method, cls):
            return method
        try:
            return cls(method)
        except ValueError:
            return None


class HttpClient(Protocol):
    """Anything with a ``requests``-style ``request()``; the module by default."""

    def request(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        ...


class HttpForwardTunnel:
    """Forward-then-request sequence for one DeviceSession.

    The tunnel owns the session's forward lock, held for the whole sequence.
    The forward command itself goes through ``DeviceSession.execute`` and so
    also takes the command lock, always after the forward lock.
    """

    def __init__(self, session: "DeviceSession", http: Optional[HttpClient] = None):
        self._session = session
        self._http = http if http is not None else requests
        self._forward_lock = threading.Lock()

    def url_for(self, path: str) -> str:
        config = self._session.config
        return f"http://{config.ip}:{config.forward_port}/{path.lstrip('/')}"

    def forward_and_request(
        self,
        guest_port: Union[str, int],
        method: Union[str, HttpMethod],
        path: str,
        body: Optional[bytes] = None,
        timeout_s: float = 0,
    ) -> HttpResult:
        """
        Args:
            guest_port: Port of the service inside the device.
            method: GET or POST. Anything else is rejected after the forward,
                without an HTTP request.
            path: Request path without the leading '/', e.g. hello?param1=1
            body: POST payload, sent as JSON. Ignored for GET.
            timeout_s: Bound in seconds on the whole HTTP exchange, body
                included; <= 0 waits forever.
        """
        with self._forward_lock:
            forward = self._session.execute(
                f"forward tcp:{self._session.config.forward_port} tcp:{guest_port}",
                FORWARD_TIMEOUT_S,
            )
            if not forward.success:
                logger.warning("forward to guest port %s failed: %s", guest_port, forward.message)
                return HttpResult(
                    error=ErrorKind.FORWARD_SETUP_FAILED,
                    message=f"forward error: {forward.message}",
                )
            logger.info(
                "forwarding tcp:%s -> tcp:%s", self._session.config.forward_port, guest_port
            )

            http_method = HttpMethod.parse(method)
            if http_method is None:
                return HttpResult(
                    error=ErrorKind.UNSUPPORTED_METHOD,
                    message=f"unknown http method: {method}",
                )

            return self._request(http_method, self.url_for(path), body, timeout_s)

    def _request(
        self,
        method: HttpMethod,
        url: str,
        body: Optional[bytes],
        timeout_s: float,
    ) -> HttpResult:
        # requests only bounds each socket read; the deadline bounds the call.
        deadline = time.monotonic() + timeout_s if timeout_s > 0 else None
        kwargs = {
            "timeout": timeout_s if timeout_s > 0 else None,
            "stream": True,
        }
        if method is HttpMethod.POST:
            kwargs["data"] = body if body is not None else b""
            kwargs["headers"] = {"Content-Type": JSON_CONTENT_TYPE}

        logger.debug("%s %s", method.value, url)
        try:
            resp = self._http.request(method.value, url, **kwargs)
        except requests.Timeout as e:
            logger.warning("%s %s timed out", method.value, url)
            return HttpResult(error=ErrorKind.TIMEOUT, message=str(e))
        except requests.RequestException as e:
            logger.warning("%s %s failed: %s", method.value, url, e)
            return HttpResult(error=ErrorKind.TRANSPORT_FAILED, message=str(e))

        chunks = []
        try:
            for chunk in resp.iter_content(chunk_size=BODY_CHUNK_SIZE):
                chunks.append(chunk)
                if deadline is not None and time.monotonic() > deadline:
                    logger.warning("%s %s exceeded %ss reading body", method.value, url, timeout_s)
                    return HttpResult(
                        status_code=resp.status_code,
                        error=ErrorKind.TIMEOUT,
                        message=f"read body timed out after {timeout_s}s",
                    )
        except requests.RequestException as e:
            logger.warning("reading body of %s %s failed: %s", method.value, url, e)
            return HttpResult(
                status_code=resp.status_code,
                error=ErrorKind.BODY_READ_FAILED,
                message=f"read body error: {e}",
            )
        finally:
            resp.close()

        return HttpResult(status_code=resp.status_code, body=b"".join(chunks))
