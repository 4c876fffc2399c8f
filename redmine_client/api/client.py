"""Redmine API client."""
import logging
from typing import Any, Dict, Optional
from urllib.parse import urlencode
from xml.etree.ElementTree import Element

import defusedxml
import defusedxml.ElementTree as etree
import requests

from config import RedmineApiConfig
from redmine_client.exceptions import TransportError

logger = logging.getLogger(__name__)


def build_path(path: str, params: Optional[Dict[str, Any]] = None) -> str:
    """Append params to path as a query string."""
    if not params:
        return path
    separator = "&" if "?" in path else "?"
    return f"{path}{separator}{urlencode(params, doseq=True)}"


class RedmineClient:
    """Client for the Redmine REST API."""

    XML_CONTENT_TYPE = "application/xml"

    def __init__(self, config: RedmineApiConfig):
        """Initialize client."""
        self.config = config
        self.session = requests.Session()

        if config.api_key:
            self.session.headers.update({"X-Redmine-API-Key": config.api_key})

    def perform(
        self,
        method: str,
        path: str,
        body: Optional[bytes] = None,
    ) -> requests.Response:
        """
        Issue a single request against the server.

        Args:
            method: GET, POST, PUT or DELETE
            path: API path, query string included
            body: Serialized XML document for mutating methods

        Returns:
            The successful response

        Raises:
            TransportError: On connection failure or non-2xx status
        """
        url = f"{self.config.base_url}{path}"
        headers = {"Content-Type": self.XML_CONTENT_TYPE} if body is not None else None

        logger.debug(f"{method} {url}")
        try:
            response = self.session.request(
                method,
                url,
                data=body,
                headers=headers,
                timeout=self.config.timeout,
            )
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            status_code = e.response.status_code if e.response is not None else None
            raise TransportError(
                f"{method} {path} failed: {e}",
                method=method,
                path=path,
                status_code=status_code,
            ) from e

        return response

    def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """GET a JSON document."""
        full_path = build_path(path, params)
        response = self.perform("GET", full_path)
        try:
            return response.json()
        except ValueError as e:
            raise TransportError(
                f"GET {full_path} returned invalid JSON: {e}",
                method="GET",
                path=full_path,
                status_code=response.status_code,
            ) from e

    def post(self, path: str, body: bytes) -> Optional[Element]:
        """POST an XML document."""
        return self._parse_xml("POST", path, self.perform("POST", path, body))

    def put(self, path: str, body: bytes) -> Optional[Element]:
        """PUT an XML document."""
        return self._parse_xml("PUT", path, self.perform("PUT", path, body))

    def delete(self, path: str) -> None:
        """DELETE a resource."""
        self.perform("DELETE", path)

    @staticmethod
    def _parse_xml(
        method: str,
        path: str,
        response: requests.Response,
    ) -> Optional[Element]:
        """Parse an XML response body; empty bodies (204, plain 200) give None.

        DTDs with entity declarations or external references are refused.
        """
        content = response.content
        if not content or not content.strip():
            return None
        try:
            return etree.fromstring(content)
        except (etree.ParseError, defusedxml.DefusedXmlException) as e:
            raise TransportError(
                f"{method} {path} returned invalid XML: {e}",
                method=method,
                path=path,
                status_code=response.status_code,
            ) from e
