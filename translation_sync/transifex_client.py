"""Transifex API client."""
import asyncio
import json
import logging
from typing import Any, Dict, List, Optional

import aiohttp
import jsonschema
import yaml

from translation_sync.app_config import SyncConfig
from translation_sync.locales import (
    ReviewedOnly,
    from_remote_code,
    is_reviewed_only,
    to_remote_code,
)

logger = logging.getLogger(__name__)

# Expected response shapes. Only the parts the sync reads are constrained.
RESOURCE_STATS_SCHEMA = {
    "type": "object",
    "required": ["stats"],
    "properties": {
        "stats": {
            "type": "object",
            "additionalProperties": {"type": "object"}
        }
    }
}

RESOURCE_DETAILS_SCHEMA = {
    "type": "object",
    "required": ["available_languages"],
    "properties": {
        "available_languages": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["code"],
                "properties": {"code": {"type": "string"}}
            }
        }
    }
}

TRANSLATION_SCHEMA = {
    "type": "object",
    "required": ["content"],
    "properties": {"content": {"type": "string"}}
}


class SyncError(Exception):
    """Base exception for failures while downloading translations."""


class TransportError(SyncError):
    """Network failure or unexpected HTTP status."""


class ParseError(SyncError):
    """Response body could not be decoded or has an unexpected shape."""


class TransifexClient:
    """Read-only client for the Transifex resource and translation endpoints."""

    def __init__(
        self,
        session: aiohttp.ClientSession,
        user: str,
        password: str,
        organization_id: str,
        project_id: str,
        source_locale: str,
        reviewed_only: ReviewedOnly = False,
        api_root: str = "https://www.transifex.com/api/2",
        organization_api_root: str = "https://api.transifex.com",
        request_timeout: Optional[float] = None,
    ) -> None:
        """Initialize the API client."""
        self.session = session
        self.organization_id = organization_id
        self.project_id = project_id
        self.source_locale = source_locale
        self.reviewed_only = reviewed_only
        self.project_url = f"{api_root}/project/{project_id}"
        self.organization_api_root = organization_api_root
        self.request_timeout = request_timeout
        self._headers = {
            "Authorization": aiohttp.BasicAuth(user, password).encode(),
        }

    @classmethod
    def from_config(cls, session: aiohttp.ClientSession, config: SyncConfig) -> "TransifexClient":
        return cls(
            session,
            user=config.credentials.user,
            password=config.credentials.password,
            organization_id=config.organization_id,
            project_id=config.project_id,
            source_locale=config.source_locale,
            reviewed_only=config.reviewed_only,
            api_root=config.api_root,
            organization_api_root=config.organization_api_root,
            request_timeout=config.request_timeout,
        )

    async def _get_json(self, url: str, schema: Dict[str, Any]) -> Dict[str, Any]:
        """GET ``url`` and return the decoded body after checking it against ``schema``."""
        kwargs: Dict[str, Any] = {"headers": self._headers}
        if self.request_timeout:
            kwargs["timeout"] = aiohttp.ClientTimeout(total=self.request_timeout)

        try:
            async with self.session.get(url, **kwargs) as response:
                logger.info("%s: %s", response.status, url)
                body = await response.text()
                if response.status != 200:
                    raise TransportError(f"GET {url} failed with status {response.status}")
        except (aiohttp.ClientError, asyncio.TimeoutError) as err:
            logger.error("Network error during request to %s: %s", url, err)
            raise TransportError(f"Network error: {err}") from err

        try:
            data = json.loads(body)
        except json.JSONDecodeError as err:
            raise ParseError(f"Invalid JSON from {url}: {err}") from err

        try:
            jsonschema.validate(data, schema)
        except jsonschema.ValidationError as err:
            raise ParseError(f"Unexpected response from {url}: {err.message}") from err

        return data

    async def get_resource_stats(self, resource_id: str) -> Dict[str, Dict[str, Any]]:
        """Get per-locale translation statistics for a resource, keyed by Transifex locale code."""
        url = (
            f"{self.organization_api_root}/organizations/{self.organization_id}"
            f"/projects/{self.project_id}/resources/{resource_id}"
        )
        data = await self._get_json(url, RESOURCE_STATS_SCHEMA)
        return data["stats"]

    async def list_locales(self, resource_id: str) -> List[str]:
        """
        List the locales available for a resource.

        The source locale is left out since its strings are authored locally.

        Returns:
            Hyphenated locale codes in the order Transifex lists them.
        """
        url = f"{self.project_url}/resource/{resource_id}?details"
        data = await self._get_json(url, RESOURCE_DETAILS_SCHEMA)
        locales = [from_remote_code(language["code"]) for language in data["available_languages"]]
        return [locale for locale in locales if locale != self.source_locale]

    async def fetch_locale(self, resource_id: str, locale: str) -> Dict[str, Any]:
        """
        Download one locale of a resource.

        Transifex returns the translation as a YAML document whose single top
        level key is the Transifex locale code; only the mapping under that key
        is returned.
        """
        code = to_remote_code(locale)
        url = f"{self.project_url}/resource/{resource_id}/translation/{code}"
        if is_reviewed_only(locale, self.reviewed_only):
            url += "?mode=reviewed"

        data = await self._get_json(url, TRANSLATION_SCHEMA)
        try:
            document = yaml.safe_load(data["content"])
        except yaml.YAMLError as err:
            raise ParseError(f"Invalid YAML content from {url}: {err}") from err

        if not isinstance(document, dict) or code not in document:
            raise ParseError(f"Content from {url} has no '{code}' section")

        content = document[code]
        if content is None:
            return {}
        if not isinstance(content, dict):
            raise ParseError(f"Section '{code}' from {url} is not a mapping")
        return content
