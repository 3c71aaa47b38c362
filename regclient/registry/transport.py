"""
Transport construction

Builds the requests session a Registry talks through. The dial strategy
(TCP or unix socket) and the dial timeout are fixed here, once, so request
code never needs to know how the registry is reached.
"""

import logging
import socket
import ssl
from dataclasses import dataclass
from typing import Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.connection import HTTPConnection
from urllib3.connectionpool import HTTPConnectionPool
from urllib3.exceptions import ConnectTimeoutError, NewConnectionError

from .endpoint import Endpoint, TransportKind

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0
USER_AGENT = "regclient/0.1.0"

# Requests against a unix socket are addressed to this placeholder host;
# the adapter dials the socket path instead.
UNIX_SOCKET_HOST = "unix.sock"
UNIX_SOCKET_BASE_URL = f"http://{UNIX_SOCKET_HOST}"


class DialTimeoutAdapter(HTTPAdapter):
    """HTTP adapter that bounds every dial by a fixed timeout"""

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        tls_config: Optional[ssl.SSLContext] = None,
        **kwargs,
    ):
        # init_poolmanager runs inside HTTPAdapter.__init__ and reads these
        self.dial_timeout = timeout
        self.tls_config = tls_config
        super().__init__(max_retries=0, **kwargs)

    def init_poolmanager(self, connections, maxsize, block=False, **pool_kwargs):
        if self.tls_config is not None:
            pool_kwargs["ssl_context"] = self.tls_config
        super().init_poolmanager(connections, maxsize, block=block, **pool_kwargs)

    def send(
        self, request, stream=False, timeout=None, verify=True, cert=None, proxies=None
    ):
        if self.tls_config is not None:
            verify = self.tls_config.verify_mode != ssl.CERT_NONE
        # Only the dial is bounded, reads wait for the registry
        return super().send(
            request,
            stream=stream,
            timeout=(self.dial_timeout, None),
            verify=verify,
            cert=cert,
            proxies=proxies,
        )


class UnixSocketConnection(HTTPConnection):
    """HTTP connection that dials a unix socket instead of host:port"""

    def __init__(self, *args, socket_path: str, dial_timeout: float, **kwargs):
        self.socket_path = socket_path
        self.dial_timeout = dial_timeout
        super().__init__(*args, **kwargs)

    def connect(self):
        sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        sock.settimeout(self.dial_timeout)
        try:
            sock.connect(self.socket_path)
        except socket.timeout as e:
            sock.close()
            raise ConnectTimeoutError(
                self,
                f"Connection to {self.socket_path} timed out. "
                f"(connect timeout={self.dial_timeout})",
            ) from e
        except OSError as e:
            sock.close()
            raise NewConnectionError(
                self, f"Failed to establish a new connection to {self.socket_path}: {e}"
            ) from e
        sock.settimeout(None)
        self.sock = sock


class UnixSocketConnectionPool(HTTPConnectionPool):
    ConnectionCls = UnixSocketConnection


class UnixSocketAdapter(DialTimeoutAdapter):
    """
    HTTP adapter routing every request to one unix socket

    The host in the request URL is ignored; all connections come from a
    single pool bound to ``socket_path``.
    """

    def __init__(self, socket_path: str, timeout: float = DEFAULT_TIMEOUT, **kwargs):
        self.socket_path = socket_path
        super().__init__(timeout=timeout, **kwargs)
        self._socket_pool = UnixSocketConnectionPool(
            UNIX_SOCKET_HOST,
            maxsize=self._pool_maxsize,
            block=self._pool_block,
            socket_path=socket_path,
            dial_timeout=timeout,
        )

    def get_connection_with_tls_context(self, request, verify, proxies=None, cert=None):
        return self._socket_pool

    def get_connection(self, url, proxies=None):
        return self._socket_pool

    def request_url(self, request, proxies):
        return request.path_url

    def close(self):
        super().close()
        self._socket_pool.close()


@dataclass
class Transport:
    """Configured session plus the base URL requests are built against"""

    session: requests.Session
    base_url: str
    kind: TransportKind


def build_transport(
    endpoint: Endpoint,
    tls_config: Optional[ssl.SSLContext] = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> Transport:
    """
    Create the session used to reach ``endpoint``

    Args:
        endpoint: Resolved registry endpoint
        tls_config: TLS configuration for tcp-tls endpoints, or None for
            the library defaults
        timeout: Dial timeout in seconds applied to every request

    Returns:
        Transport whose session has the dial strategy mounted. For unix
        sockets the base URL is the placeholder ``http://unix.sock``.
    """
    session = requests.Session()
    session.headers.update({"User-Agent": USER_AGENT})
    # No proxies or netrc from the environment
    session.trust_env = False

    if endpoint.kind is TransportKind.UNIX_SOCKET:
        adapter = UnixSocketAdapter(endpoint.path, timeout=timeout)
        base_url = UNIX_SOCKET_BASE_URL
    else:
        adapter = DialTimeoutAdapter(timeout=timeout, tls_config=tls_config)
        base_url = endpoint.url

    session.mount("http://", adapter)
    session.mount("https://", adapter)

    logger.debug(
        f"Built {endpoint.kind.value} transport for {endpoint.url} "
        f"(base_url={base_url}, timeout={timeout}s)"
    )
    return Transport(session=session, base_url=base_url, kind=endpoint.kind)


def load_tls_config(
    ca_file: Optional[str] = None,
    cert_file: Optional[str] = None,
    key_file: Optional[str] = None,
    insecure: bool = False,
) -> ssl.SSLContext:
    """
    Build a client TLS configuration

    Args:
        ca_file: PEM bundle of CAs to trust instead of the system store
        cert_file: Client certificate for mutual TLS
        key_file: Private key for ``cert_file`` (may be inside cert_file)
        insecure: Skip certificate and hostname verification
    """
    context = ssl.create_default_context(cafile=ca_file)
    if cert_file:
        context.load_cert_chain(cert_file, key_file)
    if insecure:
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
    return context
