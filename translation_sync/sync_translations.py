"""
Download the latest translations from Transifex.

Two independent steps run on every invocation:
1. Coverage: per-resource statistics are averaged into ``index.json``.
2. Locales: every locale of every resource is downloaded, cleaned of
   untranslated placeholder terms, merged across resources and written to
   ``{locale}.json``.

A failed step writes nothing and does not stop the other step.
"""
import asyncio
import logging
import os
import sys
from typing import Any, Dict

import aiohttp

from translation_sync.app_config import ConfigError, SyncConfig, load_app_config
from translation_sync.coverage import compute_coverage, write_coverage_index
from translation_sync.merger import merge_resources, write_locale_files
from translation_sync.rate_limited_map import rate_limited_map
from translation_sync.sanitizer import sanitize_locale_content
from translation_sync.transifex_client import SyncError, TransifexClient

logger = logging.getLogger(__name__)


class TranslationSync:
    """One sync run, built from the configuration and a Transifex client."""

    def __init__(self, config: SyncConfig, client: TransifexClient) -> None:
        self.config = config
        self.client = client

    @property
    def index_path(self) -> str:
        return os.path.join(self.config.translations_directory, 'index.json')

    async def sync_coverage(self) -> bool:
        """
        Fetch statistics for every resource and write the coverage index.

        Returns:
            True if the index was written.
        """
        resource_ids = self.config.resource_ids
        mapped = await rate_limited_map(
            resource_ids,
            self.client.get_resource_stats,
            interval=self.config.dispatch_interval,
            description="Resource stats"
        )
        if not mapped.ok:
            logger.error("Could not fetch resource statistics, coverage index not written: %s", mapped.error)
            return False

        try:
            coverage = compute_coverage(mapped.results, self.config.source_locale, self.config.reviewed_only)
        except SyncError as exc:
            logger.error("Could not compute coverage, coverage index not written: %s", exc)
            return False

        write_coverage_index(self.index_path, coverage)
        return True

    async def _fetch_locale(self, resource_id: str, locale: str) -> Dict[str, Any]:
        content = await self.client.fetch_locale(resource_id, locale)
        return sanitize_locale_content(content)

    async def fetch_resource(self, resource_id: str) -> Dict[str, Dict[str, Any]]:
        """
        Download every non-source locale of a resource.

        Returns:
            Locale code -> sanitized content.

        Raises:
            SyncError: The first failure among the locale downloads, raised only
                after all of them have finished.
        """
        locales = await self.client.list_locales(resource_id)
        logger.info("Resource '%s' has %d locale(s) to download", resource_id, len(locales))

        mapped = await rate_limited_map(
            locales,
            lambda locale: self._fetch_locale(resource_id, locale),
            interval=self.config.dispatch_interval,
            description=f"Locales of {resource_id}"
        )
        if not mapped.ok:
            raise mapped.error

        return dict(zip(locales, mapped.results))

    async def sync_locales(self) -> bool:
        """
        Download, merge and write the locale files of all resources.

        Returns:
            True if the locale files were written.
        """
        resource_ids = self.config.resource_ids
        mapped = await rate_limited_map(
            resource_ids,
            self.fetch_resource,
            interval=self.config.dispatch_interval,
            description="Resources"
        )
        if not mapped.ok:
            logger.error("Could not download translations, locale files not written: %s", mapped.error)
            return False

        merged = merge_resources(zip(resource_ids, mapped.results))
        write_locale_files(self.config.translations_directory, merged)
        return True

    async def run(self) -> bool:
        """
        Run both steps, coverage first.

        Returns:
            True if both the coverage index and the locale files were written.
        """
        os.makedirs(self.config.translations_directory, exist_ok=True)

        coverage_ok = await self.sync_coverage()
        locales_ok = await self.sync_locales()
        return coverage_ok and locales_ok


async def sync_translations(config: SyncConfig) -> bool:
    """Open an HTTP session and run one sync with ``config``."""
    async with aiohttp.ClientSession() as session:
        client = TransifexClient.from_config(session, config)
        return await TranslationSync(config, client).run()


async def main() -> int:
    """
    Load the configuration and run the sync.

    Returns:
        The process exit status.
    """
    try:
        config = load_app_config()
    except ConfigError as exc:
        logger.error("Configuration error: %s", exc)
        return 1

    logger.info(
        "Syncing %d resource(s) of project '%s' into '%s'",
        len(config.resource_ids), config.project_id, config.translations_directory
    )
    if await sync_translations(config):
        logger.info("Translations are up to date.")
        return 0
    logger.error("Translation sync finished with errors.")
    return 1


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
