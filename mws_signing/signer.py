import base64
import hashlib
import hmac
import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Mapping, Optional, Tuple, Union

from mws_signing.errors import InvalidEndpointError
from mws_signing.parameters import ParameterSet

logger = logging.getLogger(__name__)

HTTP_METHOD = "POST"

TIMESTAMP_PARAM = "Timestamp"
SIGNATURE_PARAM = "Signature"

ISO8601_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

_HOST_PATTERN = re.compile(r"^[A-Za-z0-9](?:[A-Za-z0-9.-]*[A-Za-z0-9])?(?::\d{1,5})?$")


class Clock(ABC):
    """Source of the signing timestamp. Subclasses return RFC 3339 UTC strings."""

    @abstractmethod
    def now(self) -> str:
        """Current UTC time, e.g. 2021-06-01T12:00:00Z."""


class SystemClock(Clock):
    """Wall clock in UTC, second precision (e.g. 2021-06-01T12:00:00Z)."""

    def now(self) -> str:
        return datetime.now(timezone.utc).strftime(ISO8601_FORMAT)


class FixedClock(Clock):
    """Clock that always returns the same timestamp. Useful in tests."""

    def __init__(self, timestamp: str):
        self.timestamp = timestamp

    def now(self) -> str:
        return self.timestamp


@dataclass(frozen=True)
class SigningContext:
    """
    Identity of the endpoint a request is signed for.

    The context is immutable and may be shared between threads and requests.

    Raises:
        InvalidEndpointError: If host or path cannot form an endpoint URL
        ValueError: If secret_key is empty
    """

    host: str
    path: str
    secret_key: str

    def __post_init__(self):
        if not self.host or not _HOST_PATTERN.match(self.host):
            raise InvalidEndpointError(f"Invalid host: {self.host!r}")
        if not self.path.startswith("/"):
            raise InvalidEndpointError(f"Path must start with '/': {self.path!r}")
        if any(c in self.path for c in "?# \t\r\n"):
            raise InvalidEndpointError(f"Path must not contain a query, fragment or whitespace: {self.path!r}")
        if not self.secret_key:
            raise ValueError("secret_key must not be empty")

    @property
    def endpoint(self) -> str:
        """Full request URL, e.g. https://mws.amazonservices.com/Orders/2013-09-01."""
        return f"https://{self.host}{self.path}"

    def __repr__(self) -> str:
        return f"SigningContext(host={self.host!r}, path={self.path!r}, secret_key='***')"


@dataclass(frozen=True)
class Unsigned:
    """Request state before signing, or after the parameters changed."""


@dataclass(frozen=True)
class Signed:
    """Request state after signing, pinned to the endpoint and parameter revision it covers."""

    timestamp: str
    signature: str
    revision: int
    host: str
    path: str

    @property
    def endpoint(self) -> str:
        return f"https://{self.host}{self.path}"


RequestState = Union[Unsigned, Signed]

UNSIGNED = Unsigned()


def build_string_to_sign(context: SigningContext, parameters: ParameterSet) -> str:
    """
    Build the version 2 string-to-sign.

    Format:
        POST\\n<host>\\n<path>\\n<canonical parameters>

    Any Signature parameter present is left out of the canonical part.

    Args:
        context: Endpoint identity
        parameters: Parameters to sign (Timestamp should already be set)

    Returns:
        The exact string whose HMAC is the signature
    """
    if SIGNATURE_PARAM in parameters:
        parameters = parameters.copy()
        parameters.remove(SIGNATURE_PARAM)

    return "\n".join([HTTP_METHOD, context.host, context.path, parameters.encode()])


def compute_signature_v2(string_to_sign: str, secret_key: str, encoding: str = "utf-8") -> str:
    """
    Compute the HMAC-SHA256 signature of a string-to-sign.

    Args:
        string_to_sign: Output of build_string_to_sign
        secret_key: The shared secret
        encoding: Text encoding for key and message (default: utf-8)

    Returns:
        Base64-encoded (standard alphabet, padded) HMAC digest
    """
    h = hmac.new(
        secret_key.encode(encoding),
        string_to_sign.encode(encoding),
        hashlib.sha256,
    )
    return base64.b64encode(h.digest()).decode("ascii")


class SignableRequest:
    """
    Parameters of one request together with its signing state.

    A request starts Unsigned. ``sign`` moves it to Signed. Any later change
    to the parameters, whether made through this object or directly on
    ``parameters``, puts it back to Unsigned until it is signed again. The
    parameter set itself cannot be swapped out after construction.

    Usage:
        request = SignableRequest()
        request.set("Action", "ListOrders")
        request.sign(SigningContext("mws.amazonservices.com", "/Orders/2013-09-01", secret))
        assert request.is_signed
    """

    def __init__(self, parameters: Optional[ParameterSet] = None, clock: Optional[Clock] = None):
        self._parameters = parameters if parameters is not None else ParameterSet()
        self.clock = clock or SystemClock()
        self._state: RequestState = UNSIGNED

    @property
    def parameters(self) -> ParameterSet:
        return self._parameters

    @property
    def state(self) -> RequestState:
        state = self._state
        if isinstance(state, Signed) and state.revision != self.parameters.revision:
            return UNSIGNED
        return state

    @property
    def is_signed(self) -> bool:
        return isinstance(self.state, Signed)

    def set(self, name: str, value: str) -> None:
        self.parameters.set(name, value)

    def augment_parameters(self, params: Mapping[str, str]) -> None:
        """Add or overwrite several parameters. The request becomes Unsigned."""
        self.parameters.update(params)

    def sign(self, context: SigningContext) -> Signed:
        """
        Sign the request for the given endpoint.

        Sets Timestamp from the clock, computes the signature over the
        resulting parameters and stores it as the Signature parameter.

        Args:
            context: Endpoint identity and secret key

        Returns:
            The Signed state now held by the request
        """
        self.parameters.remove(SIGNATURE_PARAM)
        timestamp = self.clock.now()
        self.parameters.set(TIMESTAMP_PARAM, timestamp)

        string_to_sign = build_string_to_sign(context, self.parameters)
        signature = compute_signature_v2(string_to_sign, context.secret_key)
        self.parameters.set(SIGNATURE_PARAM, signature)

        self._state = Signed(
            timestamp=timestamp,
            signature=signature,
            revision=self.parameters.revision,
            host=context.host,
            path=context.path,
        )
        logger.debug(
            "Signed request for %s%s with %d parameters at %s",
            context.host,
            context.path,
            len(self.parameters),
            timestamp,
        )
        return self._state

    def body(self) -> str:
        """Canonical encoding of the parameters, as sent on the wire."""
        return self.parameters.encode()


def verify_timestamp(
    timestamp: str,
    max_age_seconds: int = 900,
    now: Optional[datetime] = None,
) -> Tuple[bool, Optional[str]]:
    """
    Verify that an RFC 3339 Timestamp parameter is within acceptable age.

    Args:
        timestamp: The Timestamp value (e.g. 2021-06-01T12:00:00Z)
        max_age_seconds: Maximum acceptable age in seconds (default: 15 minutes)
        now: Reference time (default: current UTC time)

    Returns:
        Tuple of (is_valid, error_message)
    """
    try:
        request_time = datetime.fromisoformat(timestamp.replace("Z", "+00:00"))
    except ValueError as e:
        return False, f"Invalid timestamp: {e}"

    if request_time.tzinfo is None:
        return False, "Timestamp must carry a UTC offset"

    current_time = now or datetime.now(timezone.utc)
    time_diff = (current_time - request_time).total_seconds()

    if time_diff > max_age_seconds:
        return False, f"Request timestamp too old: {time_diff:.0f} seconds (max: {max_age_seconds})"

    # 1 minute tolerance for clock skew
    if -time_diff > 60:
        return False, "Request timestamp is in the future"

    return True, None


def verify_signature(
    parameters: ParameterSet,
    context: SigningContext,
    max_age_seconds: Optional[int] = None,
) -> Tuple[bool, Optional[str]]:
    """
    Verify the Signature parameter of a received request.

    Args:
        parameters: The received parameters, including Timestamp and Signature
        context: Endpoint identity and secret key the request was signed for
        max_age_seconds: If given, also reject requests whose Timestamp is older

    Returns:
        Tuple of (is_valid, error_message)
    """
    received_signature = parameters.get(SIGNATURE_PARAM)
    if not received_signature:
        return False, "Missing Signature parameter"

    timestamp = parameters.get(TIMESTAMP_PARAM)
    if not timestamp:
        return False, "Missing Timestamp parameter"

    if max_age_seconds is not None:
        is_valid_time, time_error = verify_timestamp(timestamp, max_age_seconds)
        if not is_valid_time:
            return False, f"Timestamp validation failed: {time_error}"

    expected_signature = compute_signature_v2(build_string_to_sign(context, parameters), context.secret_key)

    if hmac.compare_digest(expected_signature.encode("ascii"), received_signature.encode("utf-8")):
        return True, None
    return False, "Signature mismatch"
