"""Combine the locales downloaded for each resource into one file per locale."""
import json
import logging
import os
from typing import Any, Dict, Iterable, List, Tuple

logger = logging.getLogger(__name__)


def merge_resources(
        results_by_resource: Iterable[Tuple[str, Dict[str, Dict[str, Any]]]]
) -> Dict[str, Dict[str, Any]]:
    """
    Merge per-resource locale content into one mapping per locale.

    Top-level keys are merged shallowly in resource order, so a later resource
    replaces a key an earlier one already provided.

    Args:
        results_by_resource: (resource id, locale code -> locale content)
            pairs in configured order. A resource listed twice is merged twice.

    Returns:
        Locale code -> merged content.
    """
    all_strings: Dict[str, Dict[str, Any]] = {}
    for resource_id, locales in results_by_resource:
        for locale, content in locales.items():
            target = all_strings.setdefault(locale, {})
            target.update(content or {})
        logger.debug("Merged %d locale(s) from resource '%s'", len(locales), resource_id)
    return all_strings


def write_locale_files(directory: str, merged: Dict[str, Dict[str, Any]]) -> List[str]:
    """
    Write ``{locale}.json`` for every merged locale, replacing any previous file.

    Each file holds a single top-level key, the locale code.

    Returns:
        The paths written.
    """
    os.makedirs(directory, exist_ok=True)
    written = []
    for locale, content in merged.items():
        path = os.path.join(directory, f'{locale}.json')
        with open(path, 'w', encoding='utf-8') as f:
            json.dump({locale: content}, f, ensure_ascii=False, separators=(',', ':'))
        written.append(path)
    logger.info("Wrote %d locale file(s) to %s", len(written), directory)
    return written
