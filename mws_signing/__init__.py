"""
Signature Version 2 Signing Library for Commerce API Requests.

Builds the canonical parameter string, signs it with HMAC-SHA256 and sends
the signed parameters as a form-encoded POST body. A request can only be
sent after it has been signed, and any change to its parameters afterwards
requires signing it again.

Basic Usage:
    from mws_signing import MwsHttpClient

    client = MwsHttpClient(
        host="mws.amazonservices.com",
        path="/Orders/2013-09-01",
        secret_key="shared-secret",
    )
    client.augment_parameters({"Action": "ListOrders", "SellerId": "A1B2C3"})
    client.sign_query()
    body = client.request()

Lower-level Usage:
    from mws_signing import ParameterSet, RequestDispatcher, SignableRequest, SigningContext

    context = SigningContext("mws.amazonservices.com", "/Orders/2013-09-01", "shared-secret")
    request = SignableRequest(ParameterSet({"Action": "ListOrders"}))
    request.sign(context)
    body = RequestDispatcher(context).send(request)

Verification:
    from mws_signing import verify_signature

    is_valid, error = verify_signature(received_params, context, max_age_seconds=900)
"""

from mws_signing.parameters import (
    ParameterSet,
    percent_encode,
)

from mws_signing.signer import (
    Clock,
    FixedClock,
    Signed,
    SignableRequest,
    SigningContext,
    SystemClock,
    Unsigned,
    build_string_to_sign,
    compute_signature_v2,
    verify_signature,
    verify_timestamp,
)

from mws_signing.errors import (
    InvalidEndpointError,
    MwsSigningError,
    ResponseReadError,
    TransportError,
    UnsignedRequestError,
)

from mws_signing.dispatcher import RequestDispatcher
from mws_signing.config import ClientConfig
from mws_signing.client import MwsHttpClient

__version__ = "0.1.0"

__all__ = [
    # Version
    "__version__",
    # Parameters
    "ParameterSet",
    "percent_encode",
    # Signing
    "Clock",
    "FixedClock",
    "Signed",
    "SignableRequest",
    "SigningContext",
    "SystemClock",
    "Unsigned",
    "build_string_to_sign",
    "compute_signature_v2",
    "verify_signature",
    "verify_timestamp",
    # Errors
    "InvalidEndpointError",
    "MwsSigningError",
    "ResponseReadError",
    "TransportError",
    "UnsignedRequestError",
    # Transport
    "RequestDispatcher",
    "ClientConfig",
    "MwsHttpClient",
]
