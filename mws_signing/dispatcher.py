"""
Transmission of signed requests.

The dispatcher refuses to send anything that is not in the Signed state and
performs no retries; callers own retry and backoff.
"""

import logging
from typing import Optional

import requests

from mws_signing.errors import ResponseReadError, TransportError, UnsignedRequestError
from mws_signing.signer import SignableRequest, Signed, SigningContext

logger = logging.getLogger(__name__)

CONTENT_TYPE = "application/x-www-form-urlencoded"
DEFAULT_TIMEOUT = 30.0


class RequestDispatcher:
    """
    Sends signed requests as form-encoded POST bodies.

    Usage:
        dispatcher = RequestDispatcher(context)
        request.sign(context)
        body = dispatcher.send(request)

    Args:
        context: Endpoint the requests are sent to
        session: requests.Session (or compatible) used for the call
        timeout: Connect/read timeout in seconds
    """

    def __init__(
        self,
        context: SigningContext,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.context = context
        self.session = session or requests.Session()
        self.timeout = timeout

    def build_headers(self, body: str) -> dict[str, str]:
        return {
            "Content-Type": CONTENT_TYPE,
            "Content-Length": str(len(body.encode("utf-8"))),
        }

    def send(self, request: SignableRequest) -> bytes:
        """
        Send a signed request and return the raw response body.

        Args:
            request: A request in the Signed state

        Returns:
            The full response body as bytes (not interpreted)

        Raises:
            UnsignedRequestError: If the request is not signed, or was signed for
                another endpoint; nothing is sent
            TransportError: If the connection fails or times out
            ResponseReadError: If the response body cannot be fully read
        """
        state = request.state
        if not isinstance(state, Signed):
            raise UnsignedRequestError()

        url = self.context.endpoint
        if state.endpoint != url:
            raise UnsignedRequestError(f"Query is signed for {state.endpoint}, not {url}")

        body = request.body()
        headers = self.build_headers(body)

        logger.debug("POST %s (%s bytes)", url, headers["Content-Length"])

        try:
            response = self.session.post(
                url,
                data=body.encode("utf-8"),
                headers=headers,
                timeout=self.timeout,
                stream=True,
            )
        except requests.RequestException as e:
            logger.error("Request failed: POST %s - %s", url, e)
            raise TransportError(f"POST {url} failed: {e}", url=url) from e

        try:
            content = response.content
        except (requests.RequestException, OSError) as e:
            logger.error("Failed to read response body: POST %s - %s", url, e)
            raise ResponseReadError(
                f"Failed to read response from {url}: {e}",
                url=url,
                status_code=response.status_code,
            ) from e
        finally:
            response.close()

        if response.status_code >= 300:
            logger.warning("POST %s returned HTTP %s", url, response.status_code)
        else:
            logger.debug("POST %s returned HTTP %s (%d bytes)", url, response.status_code, len(content))

        return content

    def close(self) -> None:
        self.session.close()
