"""Shared fixtures for tests."""

import os
import shutil
import socket
import tempfile

import pytest

from regclient.registry.client import Registry
from regclient.registry.models import RegistryConfig
from tests.fixtures.registry_server import (
    FakeRegistryServer,
    FakeTLSRegistryServer,
    FakeUnixRegistryServer,
    start_server,
    stop_server,
)


@pytest.fixture
def registry_server():
    """Fake registry listening on a random localhost port."""
    server = FakeRegistryServer()
    start_server(server)
    yield server
    stop_server(server)


@pytest.fixture
def tls_registry_server():
    """Fake registry serving HTTPS with the self-signed test certificate."""
    server = FakeTLSRegistryServer()
    start_server(server)
    yield server
    stop_server(server)


@pytest.fixture
def short_tmp_dir():
    """Temp dir with a short path; unix socket paths are limited to ~100 bytes."""
    path = tempfile.mkdtemp(prefix="rc-")
    yield path
    shutil.rmtree(path, ignore_errors=True)


@pytest.fixture
def unix_registry_server(short_tmp_dir):
    """Fake registry listening on a unix socket."""
    if not hasattr(socket, "AF_UNIX"):
        pytest.skip("unix sockets not supported on this platform")
    server = FakeUnixRegistryServer(os.path.join(short_tmp_dir, "registry.sock"))
    start_server(server)
    yield server
    stop_server(server)


@pytest.fixture
def registry():
    """Registry client for unit tests; never dialed unless a test does so."""
    with Registry(RegistryConfig(url="localhost:5000", timeout=5)) as client:
        yield client


@pytest.fixture
def closed_port():
    """A localhost port with nothing listening on it."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]
    sock.close()
    return port
