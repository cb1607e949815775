"""
HTTP client wrapper for a single API operation.

Bundles the endpoint identity, the request parameters and the dispatcher so
that the usual flow is: set parameters, sign, send.
"""

import logging
from typing import Mapping, Optional

import requests

from mws_signing.config import ClientConfig
from mws_signing.dispatcher import DEFAULT_TIMEOUT, RequestDispatcher
from mws_signing.parameters import ParameterSet
from mws_signing.signer import Clock, SignableRequest, Signed, SigningContext

logger = logging.getLogger(__name__)


class MwsHttpClient:
    """
    Client for one operation path on one host.

    Usage:
        client = MwsHttpClient("mws.amazonservices.com", "/Orders/2013-09-01", secret_key)
        client.augment_parameters({"Action": "ListOrders", "SellerId": "A1B2C3"})
        client.sign_query()
        body = client.request()

    Raises:
        InvalidEndpointError: If host or path is malformed
        ValueError: If secret_key is empty
    """

    def __init__(
        self,
        host: str,
        path: str,
        secret_key: str,
        parameters: Optional[Mapping[str, str]] = None,
        clock: Optional[Clock] = None,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.context = SigningContext(host=host, path=path, secret_key=secret_key)
        self._request = SignableRequest(ParameterSet(parameters), clock=clock)
        self.dispatcher = RequestDispatcher(self.context, session=session, timeout=timeout)

    @classmethod
    def from_config(cls, config: ClientConfig, path: str, **kwargs) -> "MwsHttpClient":
        return cls(config.host, path, config.secret_key, timeout=config.timeout, **kwargs)

    @property
    def parameters(self) -> ParameterSet:
        return self._request.parameters

    @property
    def signed(self) -> bool:
        return self._request.is_signed

    def endpoint(self) -> str:
        return self.context.endpoint

    def augment_parameters(self, params: Mapping[str, str]) -> None:
        """Add parameters to the query; the query is no longer signed."""
        self._request.augment_parameters(params)

    def sign_query(self) -> Signed:
        """Compute the signature and add Timestamp and Signature to the parameters."""
        return self._request.sign(self.context)

    def request(self) -> bytes:
        """
        Send the signed query to the server.

        Returns:
            Raw response body

        Raises:
            UnsignedRequestError: If the query has not been signed since its last change
            TransportError: On connection failure
            ResponseReadError: If the body cannot be read
        """
        action = self.parameters.get("Action", "")
        logger.info("Sending %s to %s", action or "request", self.endpoint())
        return self.dispatcher.send(self._request)

    def close(self) -> None:
        self.dispatcher.close()

    def __enter__(self) -> "MwsHttpClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
