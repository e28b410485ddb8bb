"""
Provider API clients for making authenticated requests.

One base client carries the HTTP plumbing (timeouts, transport, response
handling); each hosting provider only contributes its base URL and auth headers.
"""

import base64
import logging
from typing import Any, Dict, List, Optional, Tuple

import httpx

from common.config.config import (
    BITBUCKET_API_URL,
    GITHUB_API_URL,
    GITHUB_API_VERSION,
    GITLAB_API_URL,
    HTTP_CONNECT_RETRIES,
    HTTP_CONNECT_TIMEOUT_SECONDS,
    HTTP_TIMEOUT_SECONDS,
)
from publisher.errors import AuthenticationMissing, RemoteRequestError, RemoteWriteRejected
from publisher.models.types import Credential

logger = logging.getLogger(__name__)

MultipartFiles = List[Tuple[str, Tuple[str, bytes, str]]]


class ProviderAPIClient:
    """Base client for hosting provider API interactions."""

    provider_label = "Provider"

    def __init__(
        self,
        credential: Credential,
        base_url: str,
        timeout: float = HTTP_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize provider API client.

        Args:
            credential: Credential used for every request
            base_url: API root URL
            timeout: Request timeout in seconds
            transport: Custom httpx transport (defaults to one with connection retries)
        """
        if not credential.secret:
            raise AuthenticationMissing(f"{self.provider_label} token is not configured")
        self.credential = credential
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    def _get_headers(self) -> Dict[str, str]:
        """Get headers for API requests.

        Returns:
            Headers dictionary
        """
        return {
            "Authorization": f"Bearer {self.credential.secret}",
            "Accept": "application/json",
        }

    def url_for(self, path: str) -> str:
        """Build an absolute URL from an API path."""
        return f"{self.base_url}/{path.lstrip('/')}"

    async def request(
        self,
        method: str,
        path: str,
        data: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
        form: Optional[Dict[str, str]] = None,
        files: Optional[MultipartFiles] = None,
    ) -> Any:
        """Make an API request.

        Args:
            method: HTTP method (GET, POST, PUT, PATCH, DELETE)
            path: API path (without base URL)
            data: JSON request body
            params: Query parameters
            form: Multipart form fields
            files: Multipart file parts

        Returns:
            Decoded JSON response, or empty dict for empty bodies

        Raises:
            RemoteRequestError: If a read request fails
            RemoteWriteRejected: If a mutating request fails
        """
        url = self.url_for(path)
        response = await self._send(method, url, data, params, form, files)
        return self._process_response(response, method, url)

    async def exists(self, path: str, params: Optional[Dict[str, Any]] = None) -> bool:
        """Probe a resource with GET.

        Returns:
            True on 200, False on 404

        Raises:
            RemoteRequestError: For any other status
        """
        url = self.url_for(path)
        response = await self._send("GET", url, None, params, None, None)
        if response.status_code == 404:
            logger.debug(f"{self.provider_label} resource {url} not found")
            return False
        self._process_response(response, "GET", url)
        return True

    async def _send(
        self,
        method: str,
        url: str,
        data: Optional[Dict[str, Any]],
        params: Optional[Dict[str, Any]],
        form: Optional[Dict[str, str]],
        files: Optional[MultipartFiles],
    ) -> httpx.Response:
        try:
            timeout_config = httpx.Timeout(self.timeout, connect=HTTP_CONNECT_TIMEOUT_SECONDS)
            return await self._execute_http_request(
                method, url, self._get_headers(), data, params, form, files, timeout_config
            )
        except httpx.RequestError as e:
            logger.error(f"{self.provider_label} API request error on {method} {url}: {e}")
            raise self._error_class(method)(method, url, None, str(e)) from e

    async def _execute_http_request(
        self,
        method: str,
        url: str,
        headers: Dict[str, str],
        data: Optional[Dict[str, Any]],
        params: Optional[Dict[str, Any]],
        form: Optional[Dict[str, str]],
        files: Optional[MultipartFiles],
        timeout_config: httpx.Timeout,
    ) -> httpx.Response:
        """Execute HTTP request with method routing.

        Raises:
            ValueError: If HTTP method is unsupported
        """
        method_upper = method.upper()
        transport = self._transport or httpx.AsyncHTTPTransport(retries=HTTP_CONNECT_RETRIES)

        async with httpx.AsyncClient(
            timeout=timeout_config, trust_env=False, transport=transport
        ) as client:
            if method_upper == "GET":
                return await client.get(url, headers=headers, params=params)
            elif method_upper == "POST":
                if form is not None or files is not None:
                    return await client.post(
                        url, data=form, files=files, headers=headers, params=params
                    )
                return await client.post(url, json=data, headers=headers, params=params)
            elif method_upper == "PUT":
                return await client.put(url, json=data, headers=headers, params=params)
            elif method_upper == "PATCH":
                return await client.patch(url, json=data, headers=headers, params=params)
            elif method_upper == "DELETE":
                return await client.delete(url, headers=headers, params=params)
            else:
                raise ValueError(f"Unsupported HTTP method: {method}")

    def _process_response(self, response: httpx.Response, method: str, url: str) -> Any:
        """Process HTTP response and extract data.

        Raises:
            RemoteRequestError: If response status indicates failure
        """
        if 200 <= response.status_code < 300:
            logger.info(
                f"{self.provider_label} API {method} request to {url} "
                f"successful (status: {response.status_code})"
            )
            if response.content:
                try:
                    return response.json()
                except ValueError:
                    return {}
            return {}

        provider_message = self._extract_error_message(response)
        logger.error(
            f"{self.provider_label} API {method} request to {url} failed "
            f"(status {response.status_code}): {provider_message}"
        )
        raise self._error_class(method)(method, url, response.status_code, provider_message)

    @staticmethod
    def _error_class(method: str):
        if method.upper() == "GET":
            return RemoteRequestError
        return RemoteWriteRejected

    @staticmethod
    def _extract_error_message(response: httpx.Response) -> str:
        """Pull the provider's error message out of a failed response."""
        try:
            payload = response.json()
        except ValueError:
            return response.text
        if isinstance(payload, dict):
            error = payload.get("error")
            if isinstance(error, dict) and error.get("message"):
                return str(error["message"])
            if payload.get("message"):
                return str(payload["message"])
            if error:
                return str(error)
        return response.text

    async def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, data: Optional[Dict[str, Any]] = None) -> Any:
        return await self.request("POST", path, data=data)

    async def put(self, path: str, data: Optional[Dict[str, Any]] = None) -> Any:
        return await self.request("PUT", path, data=data)

    async def patch(self, path: str, data: Optional[Dict[str, Any]] = None) -> Any:
        return await self.request("PATCH", path, data=data)

    async def post_multipart(
        self,
        path: str,
        form: Dict[str, str],
        files: Optional[MultipartFiles] = None,
    ) -> Any:
        """Make a multipart/form-data POST request.

        Args:
            path: API path
            form: Plain form fields
            files: File parts as (field name, (filename, content, content type))

        Returns:
            Response data
        """
        return await self.request("POST", path, form=form, files=files or [])


class GitHubAPIClient(ProviderAPIClient):
    """GitHub REST API client."""

    provider_label = "GitHub"

    def __init__(
        self,
        credential: Credential,
        base_url: str = GITHUB_API_URL,
        timeout: float = HTTP_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(credential, base_url, timeout, transport)

    def _get_headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.credential.secret}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": GITHUB_API_VERSION,
        }


class GitLabAPIClient(ProviderAPIClient):
    """GitLab v4 REST API client."""

    provider_label = "GitLab"

    def __init__(
        self,
        credential: Credential,
        base_url: str = GITLAB_API_URL,
        timeout: float = HTTP_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(credential, base_url, timeout, transport)


class BitbucketAPIClient(ProviderAPIClient):
    """Bitbucket Cloud 2.0 API client using basic auth with an app password."""

    provider_label = "Bitbucket"

    def __init__(
        self,
        credential: Credential,
        base_url: str = BITBUCKET_API_URL,
        timeout: float = HTTP_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not credential.username:
            raise AuthenticationMissing("Bitbucket username is not configured")
        super().__init__(credential, base_url, timeout, transport)

    def _get_headers(self) -> Dict[str, str]:
        pair = f"{self.credential.username}:{self.credential.secret}".encode("utf-8")
        return {
            "Authorization": f"Basic {base64.b64encode(pair).decode('ascii')}",
            "Accept": "application/json",
        }
