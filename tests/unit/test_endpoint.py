"""Tests for connection string resolution."""

import ssl

import pytest

from regclient.registry.endpoint import Endpoint, TransportKind, resolve_endpoint
from regclient.registry.exceptions import InvalidAddressError, RegistryError

pytestmark = pytest.mark.unit


@pytest.fixture
def tls_config():
    return ssl.create_default_context()


class TestUnixAddresses:
    """Tests for unix:// connection strings."""

    @pytest.mark.parametrize(
        "address,socket_path",
        [
            ("unix:///var/run/registry.sock", "/var/run/registry.sock"),
            ("unix:///tmp/r.sock", "/tmp/r.sock"),
            ("unix://localhost/run/registry.sock", "/run/registry.sock"),
        ],
    )
    def test_unix_scheme_resolves_to_socket(self, address, socket_path):
        """Test that unix addresses capture the path as the socket path."""
        endpoint = resolve_endpoint(address)
        assert endpoint.kind is TransportKind.UNIX_SOCKET
        assert endpoint.path == socket_path

    def test_unix_ignores_tls_config(self, tls_config):
        """Test that a TLS config does not change a unix address."""
        endpoint = resolve_endpoint("unix:///var/run/registry.sock", tls_config)
        assert endpoint.kind is TransportKind.UNIX_SOCKET

    def test_unix_without_path(self):
        """Test that a unix address needs a socket path."""
        with pytest.raises(InvalidAddressError):
            resolve_endpoint("unix://")


class TestTcpAddresses:
    """Tests for tcp://, scheme-less, http:// and https:// strings."""

    @pytest.mark.parametrize("address", ["localhost:5000", "tcp://localhost:5000"])
    def test_plain_without_tls_config(self, address):
        """Test that missing/tcp scheme resolves to plain http without TLS."""
        endpoint = resolve_endpoint(address)
        assert endpoint.kind is TransportKind.TCP_PLAIN
        assert endpoint.scheme == "http"
        assert endpoint.url == "http://localhost:5000"

    @pytest.mark.parametrize("address", ["localhost:5000", "tcp://localhost:5000"])
    def test_tls_with_tls_config(self, address, tls_config):
        """Test that missing/tcp scheme resolves to https with TLS."""
        endpoint = resolve_endpoint(address, tls_config)
        assert endpoint.kind is TransportKind.TCP_TLS
        assert endpoint.url == "https://localhost:5000"

    def test_explicit_http_kept_with_tls_config(self, tls_config):
        """Test that an explicit http scheme is not upgraded."""
        endpoint = resolve_endpoint("http://registry:5000", tls_config)
        assert endpoint.kind is TransportKind.TCP_PLAIN

    def test_explicit_https_without_tls_config(self):
        """Test that an explicit https scheme uses TLS defaults."""
        endpoint = resolve_endpoint("https://registry.example.com")
        assert endpoint.kind is TransportKind.TCP_TLS
        assert endpoint.host == "registry.example.com"

    def test_path_prefix_kept_without_trailing_slash(self):
        """Test that a path prefix is part of the base URL."""
        endpoint = resolve_endpoint("https://proxy.example.com/registry/")
        assert endpoint.path == "/registry"
        assert endpoint.url == "https://proxy.example.com/registry"

    def test_host_without_port(self):
        """Test a bare hostname."""
        endpoint = resolve_endpoint("registry")
        assert endpoint == Endpoint(
            scheme="http", host="registry", path="", kind=TransportKind.TCP_PLAIN
        )

    def test_ipv6_host(self):
        """Test a bracketed IPv6 address."""
        endpoint = resolve_endpoint("tcp://[::1]:5000")
        assert endpoint.url == "http://[::1]:5000"

    def test_surrounding_whitespace(self):
        """Test that surrounding whitespace is ignored."""
        assert resolve_endpoint("  localhost:5000 \n").host == "localhost:5000"


class TestInvalidAddresses:
    """Tests for strings that are not registry addresses."""

    @pytest.mark.parametrize(
        "address",
        [
            "",
            "   ",
            "localhost:abc",
            "localhost:99999",
            "http://[::1",
            "ftp://registry:21",
            "http://",
            "tcp://:5000",
        ],
    )
    def test_invalid_address(self, address):
        """Test that malformed addresses raise InvalidAddressError."""
        with pytest.raises(InvalidAddressError):
            resolve_endpoint(address)

    def test_invalid_address_is_registry_error(self):
        """Test that InvalidAddressError can be caught as RegistryError."""
        with pytest.raises(RegistryError):
            resolve_endpoint("ftp://registry")
