"""
Request parameter collection with a canonical encoding.

The encoding produced here is used both as the parameter part of the
string-to-sign and, unchanged, as the POST body sent over the wire.
"""

from typing import Dict, Iterator, Mapping, Optional, Tuple
from urllib.parse import quote


def percent_encode(value: str) -> str:
    """
    Percent-encode a string for the canonical form.

    Only unreserved characters (ASCII letters, digits, "-", "_", ".", "~")
    pass through. Everything else, including "/" and space, is encoded from
    its UTF-8 bytes (space becomes %20, never "+").
    """
    return quote(value, safe="", encoding="utf-8")


def _sort_key(name: str) -> bytes:
    return name.encode("utf-8")


class ParameterSet:
    """
    Mapping of parameter names to string values.

    Names are unique; setting an existing name overwrites its value. Every
    mutation bumps ``revision`` so that holders of a signature can tell
    whether the parameters changed after signing.

    Usage:
        params = ParameterSet()
        params.set("Action", "ListOrders")
        params.set("SellerId", "A1B2C3")
        body = params.encode()  # "Action=ListOrders&SellerId=A1B2C3"
    """

    def __init__(self, initial: Optional[Mapping[str, str]] = None):
        self._values: Dict[str, str] = {}
        self._revision = 0
        if initial:
            self.update(initial)

    @property
    def revision(self) -> int:
        """Number of mutations applied so far."""
        return self._revision

    def set(self, name: str, value: str) -> None:
        """
        Insert or overwrite the value for a parameter.

        Args:
            name: Parameter name
            value: Parameter value (any content; escaped at encode time)

        Raises:
            TypeError: If name or value is not a string
        """
        if not isinstance(name, str) or not isinstance(value, str):
            raise TypeError(
                f"Parameter name and value must be strings, got {type(name).__name__}={type(value).__name__}"
            )
        self._values[name] = value
        self._revision += 1

    def update(self, params: Mapping[str, str]) -> None:
        """Set every name/value pair from a mapping."""
        for name, value in params.items():
            self.set(name, value)

    def remove(self, name: str) -> Optional[str]:
        """Remove a parameter, returning its value (None if absent)."""
        if name not in self._values:
            return None
        self._revision += 1
        return self._values.pop(name)

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self._values.get(name, default)

    def items(self) -> Iterator[Tuple[str, str]]:
        """Yield (name, value) pairs in canonical (byte-wise) name order."""
        for name in sorted(self._values, key=_sort_key):
            yield name, self._values[name]

    def copy(self) -> "ParameterSet":
        """Return an independent copy with the same contents."""
        return ParameterSet(self._values)

    def to_dict(self) -> Dict[str, str]:
        return dict(self._values)

    def encode(self) -> str:
        """
        Produce the canonical encoding of the current contents.

        Pairs are sorted by the UTF-8 bytes of their names, each name and
        value is percent-encoded, and the ``name=value`` pairs are joined
        with "&". An empty set encodes to an empty string.

        Returns:
            The canonical, URL-safe parameter string
        """
        return "&".join(
            f"{percent_encode(name)}={percent_encode(value)}" for name, value in self.items()
        )

    def __len__(self) -> int:
        return len(self._values)

    def __contains__(self, name: object) -> bool:
        return name in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._values, key=_sort_key))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ParameterSet):
            return NotImplemented
        return self._values == other._values

    def __repr__(self) -> str:
        return f"ParameterSet({self.encode()!r})"
