"""
Coverage index: how much of each locale is translated across all resources.

The index lists every downloaded locale with its completion fraction, plus
the source locale which is complete by definition.
"""
import json
import logging
import os
from decimal import Decimal, ROUND_FLOOR
from typing import Any, Dict, List, Union

from translation_sync.locales import ReviewedOnly, from_remote_code, is_reviewed_only
from translation_sync.transifex_client import ParseError

logger = logging.getLogger(__name__)

TRANSLATED = 'translated'
# reviewed_1 = reviewed, reviewed_2 = proofread
REVIEWED = 'reviewed_1'

_TWO_PLACES = Decimal('0.01')


def stat_type_for(locale: str, reviewed_only: ReviewedOnly) -> str:
    """Return the statistic used to measure a locale's coverage."""
    return REVIEWED if is_reviewed_only(locale, reviewed_only) else TRANSLATED


def floor_percentage(value: float) -> float:
    """
    Truncate a coverage fraction to two decimal places.

    Truncation instead of rounding means 1.0 is only ever reported for a
    locale that is really complete. The shortest decimal form of the float is
    used so that values like 0.58 are not pushed down to 0.57.
    """
    return float(Decimal(repr(value)).quantize(_TWO_PLACES, rounding=ROUND_FLOOR))


def compute_coverage(
        stats_per_resource: List[Dict[str, Dict[str, Any]]],
        source_locale: str,
        reviewed_only: ReviewedOnly = False
) -> Dict[str, Dict[str, float]]:
    """
    Average per-resource statistics into one coverage index.

    Every resource weighs the same regardless of its size.

    Args:
        stats_per_resource: One ``stats`` mapping per resource, keyed by Transifex locale code.
        source_locale: The locale strings are authored in; always reported as complete.
        reviewed_only: The reviewed-only setting deciding which statistic is read.

    Returns:
        Locale code -> ``{"pct": fraction}``, sorted by locale code.

    Raises:
        ParseError: If a locale lacks the statistic it is measured by.
    """
    resource_count = len(stats_per_resource)
    coverage_by_locale: Dict[str, float] = {}

    for stats in stats_per_resource:
        for code, locale_stats in stats.items():
            stat_type = stat_type_for(code, reviewed_only)
            try:
                percentage = float(locale_stats[stat_type]['percentage'])
            except (KeyError, TypeError, ValueError) as exc:
                raise ParseError(f"Missing '{stat_type}' percentage for locale '{code}'") from exc

            locale = from_remote_code(code)
            coverage_by_locale[locale] = coverage_by_locale.get(locale, 0.0) + percentage / resource_count

    data_locales: Dict[str, Dict[str, Union[int, float]]] = {
        locale: {'pct': floor_percentage(coverage)} for locale, coverage in coverage_by_locale.items()
    }
    data_locales[source_locale] = {'pct': 1}

    return {locale: data_locales[locale] for locale in sorted(data_locales)}


def _json_number(value: float) -> Union[int, float]:
    return int(value) if float(value).is_integer() else value


def write_coverage_index(index_path: str, coverage: Dict[str, Dict[str, float]]) -> None:
    """Overwrite the coverage index file with ``coverage``."""
    serializable = {
        locale: {'pct': _json_number(entry['pct'])} for locale, entry in coverage.items()
    }
    directory = os.path.dirname(index_path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(index_path, 'w', encoding='utf-8') as f:
        json.dump(serializable, f, ensure_ascii=False, separators=(',', ':'))
    logger.info("Wrote coverage for %d locale(s) to %s", len(serializable), index_path)
