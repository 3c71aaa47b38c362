import logging
import ssl
from typing import Mapping, Optional

import requests
from pydantic import ValidationError
from requests.exceptions import RequestException

from regclient.logging_config import TRACE_REQUESTS, StructuredLogContext

from .endpoint import TransportKind, resolve_endpoint
from .exceptions import (
    LikelyTLSMismatchError,
    MalformedResponseError,
    NotFoundError,
    RegistryConnectionError,
    RegistryError,
    RequestFailedError,
)
from .models import CatalogResponse, RegistryConfig, TagsResponse
from .transport import build_transport

logger = logging.getLogger(__name__)

API_VERSION = "v2"

# Verbs that always carry a body, even an empty one
BODY_METHODS = ("POST", "PUT")

TLS_MISMATCH_HINT = "Are you trying to connect to a TLS-enabled registry without TLS?"


class Registry:
    """
    Docker Registry HTTP API V2 client

    The connection string is resolved and the transport built once, here;
    every request afterwards goes through the same session. A Registry can
    be shared between threads.

    Example:
        with Registry(RegistryConfig(url="unix:///run/registry.sock")) as registry:
            print(registry.list_repositories().repositories)
    """

    def __init__(
        self,
        config: Optional[RegistryConfig] = None,
        tls_config: Optional[ssl.SSLContext] = None,
    ):
        """
        Args:
            config: Address and dial timeout. Defaults to RegistryConfig().
            tls_config: TLS configuration; also makes "tcp://" and
                scheme-less addresses resolve to https

        Raises:
            InvalidAddressError: If config.url is not a usable address
        """
        self.config = config or RegistryConfig()
        self.tls_config = tls_config
        self.endpoint = resolve_endpoint(self.config.url, tls_config)

        transport = build_transport(self.endpoint, tls_config, self.config.timeout)
        self.url = transport.base_url
        self._session = transport.session

    @property
    def kind(self) -> TransportKind:
        return self.endpoint.kind

    def stream_request(
        self,
        method: str,
        path: str,
        body: Optional[bytes] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> requests.Response:
        """
        Send one request and return the still-open response

        The caller owns the response and must close it, e.g. with
        ``with registry.stream_request("GET", path) as response: ...``.

        Args:
            method: HTTP verb
            path: Path relative to the registry base URL, e.g. "/v2/_catalog"
            body: Request body. POST and PUT send an empty body when None.
            headers: Extra headers, applied over Content-Type: application/json

        Raises:
            RegistryConnectionError: If the registry could not be reached
            LikelyTLSMismatchError: If the failure looks like plaintext
                talking to a TLS registry
            NotFoundError: On 404
            RequestFailedError: On any other 4xx/5xx
        """
        method = method.upper()
        if method in BODY_METHODS and body is None:
            body = b""

        url = f"{self.url}{path}"
        request_headers = {"Content-Type": "application/json"}
        if headers:
            request_headers.update(headers)

        if TRACE_REQUESTS:
            logger.debug(f"{method} {url}")

        try:
            response = self._session.request(
                method, url, data=body, headers=request_headers, stream=True
            )
        except RequestException as e:
            raise self._connection_error(method, path, e) from e

        if response.status_code == 404:
            response.close()
            logger.debug(f"{method} {path}: not found")
            raise NotFoundError(f"{method} {path}: not found")

        if response.status_code >= 400:
            # The error body is never read
            response.close()
            context = StructuredLogContext(
                method=method, path=path, status=response.status_code
            )
            logger.error(f"Registry request failed: {context}")
            raise RequestFailedError(
                f"{method} {path} failed: {response.status_code} {response.reason}",
                status_code=response.status_code,
                reason=response.reason,
            )

        return response

    def request(
        self,
        method: str,
        path: str,
        body: Optional[bytes] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> bytes:
        """Like stream_request, but reads the whole body and closes the response"""
        response = self.stream_request(method, path, body=body, headers=headers)
        try:
            return response.content
        except RequestException as e:
            logger.error(f"Failed reading response for {method} {path}: {e}")
            raise RegistryConnectionError(
                f"Reading response for {method} {path} failed: {e}"
            ) from e
        finally:
            response.close()

    def _connection_error(
        self, method: str, path: str, error: RequestException
    ) -> RegistryConnectionError:
        message = str(error)
        if "connection refused" not in message.lower() and self.tls_config is None:
            logger.warning(f"{method} {path} failed, TLS mismatch suspected: {message}")
            return LikelyTLSMismatchError(f"{message}. {TLS_MISMATCH_HINT}")
        logger.error(f"{method} {path} failed: {message}")
        return RegistryConnectionError(message)

    def is_alive(self) -> bool:
        """Check if registry is alive (answers /v2/ with 200 or 401)"""
        try:
            with self.stream_request("GET", f"/{API_VERSION}/"):
                return True
        except RequestFailedError as e:
            return e.status_code == 401
        except RegistryError as e:
            logger.debug(f"Registry health check failed: {e}")
            return False

    def list_repositories(self) -> CatalogResponse:
        """
        List all repositories in the catalog

        Raises:
            RegistryError: Any classified request failure, unchanged
            MalformedResponseError: If response doesn't match schema
        """
        data = self.request("GET", f"/{API_VERSION}/_catalog")
        try:
            return CatalogResponse.model_validate_json(data)
        except ValidationError as e:
            logger.error(f"Invalid catalog response: {e}")
            raise MalformedResponseError(f"Invalid catalog format: {e}") from e

    def list_tags(self, repo: str) -> TagsResponse:
        """
        List all tags for a repository

        Args:
            repo: Repository name (e.g., "library/alpine")
        """
        data = self.request("GET", f"/{API_VERSION}/{repo}/tags/list")
        try:
            return TagsResponse.model_validate_json(data)
        except ValidationError as e:
            logger.error(f"Invalid tags response for {repo}: {e}")
            raise MalformedResponseError(f"Invalid tags format: {e}") from e

    def close(self):
        """Close the underlying session"""
        self._session.close()

    def __enter__(self):
        return self

    def __exit__(self, exec_type, exec_val, exec_tb):
        self.close()
