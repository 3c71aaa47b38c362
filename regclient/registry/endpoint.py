"""
Connection string parsing

Turns ``[scheme://]host[:port][/path]`` into a normalized endpoint and the
transport kind used to reach it.
"""

import ssl
from dataclasses import dataclass
from enum import Enum
from typing import Optional
from urllib.parse import urlsplit

from .exceptions import InvalidAddressError


class TransportKind(str, Enum):
    """How the registry is dialed"""

    TCP_PLAIN = "tcp-plain"
    TCP_TLS = "tcp-tls"
    UNIX_SOCKET = "unix-socket"


_SCHEME_KINDS = {
    "http": TransportKind.TCP_PLAIN,
    "https": TransportKind.TCP_TLS,
    "unix": TransportKind.UNIX_SOCKET,
}


@dataclass(frozen=True)
class Endpoint:
    """Resolved registry address"""

    scheme: str
    host: str
    path: str
    kind: TransportKind

    @property
    def url(self) -> str:
        return f"{self.scheme}://{self.host}{self.path}"


def resolve_endpoint(
    address: str, tls_config: Optional[ssl.SSLContext] = None
) -> Endpoint:
    """
    Parse a connection string into an Endpoint

    Args:
        address: e.g. "localhost:5000", "tcp://registry:5000",
            "https://registry.example.com", "unix:///run/registry.sock"
        tls_config: TLS configuration the client will use, if any. Decides
            between http and https when the scheme is missing or "tcp".

    Raises:
        InvalidAddressError: If the string is not a usable registry address
    """
    if not address or not address.strip():
        raise InvalidAddressError("Registry address is empty")

    raw = address.strip()
    if "://" not in raw:
        raw = f"//{raw}"

    try:
        parts = urlsplit(raw)
        # .port validates the port component lazily
        parts.port
    except ValueError as e:
        raise InvalidAddressError(f"Invalid registry address {address!r}: {e}") from e

    scheme = parts.scheme
    if scheme in ("", "tcp"):
        scheme = "https" if tls_config is not None else "http"

    kind = _SCHEME_KINDS.get(scheme)
    if kind is None:
        raise InvalidAddressError(
            f"Unsupported scheme {parts.scheme!r} in registry address {address!r}"
        )

    if kind is TransportKind.UNIX_SOCKET:
        if not parts.path:
            raise InvalidAddressError(f"Missing socket path in {address!r}")
        return Endpoint(scheme=scheme, host=parts.netloc, path=parts.path, kind=kind)

    if not parts.hostname:
        raise InvalidAddressError(f"Missing host in registry address {address!r}")

    return Endpoint(
        scheme=scheme,
        host=parts.netloc,
        path=parts.path.rstrip("/"),
        kind=kind,
    )
