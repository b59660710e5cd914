import re
from typing import Any, Dict

# Transifex hands back the untranslated placeholder for preset and field
# terms ("<translate with synonyms or related terms for 'Foo'>", "[bar]").
PRESET_TERMS_PLACEHOLDER = re.compile(r'<.*>', re.DOTALL)
FIELD_TERMS_PLACEHOLDER = re.compile(r'\[.*\]', re.DOTALL)


def _strip_placeholder_terms(entries: Any, placeholder: re.Pattern) -> None:
    """Remove the first placeholder from each entry's terms, dropping entries left empty."""
    if not isinstance(entries, dict):
        return

    for key in list(entries.keys()):
        entry = entries[key]
        if not isinstance(entry, dict):
            continue
        terms = entry.get('terms')
        if not terms or not isinstance(terms, str):
            continue

        terms = placeholder.sub('', terms, count=1).strip()
        if terms:
            entry['terms'] = terms
            continue

        del entry['terms']
        if not entry:
            del entries[key]


def sanitize_locale_content(content: Dict[str, Any]) -> Dict[str, Any]:
    """
    Remove preset and field terms that were never really translated.

    Operates in place and returns ``content``. Applying it twice gives the
    same result as applying it once.
    """
    presets = content.get('presets') if isinstance(content, dict) else None
    if not isinstance(presets, dict):
        return content

    _strip_placeholder_terms(presets.get('presets'), PRESET_TERMS_PLACEHOLDER)
    _strip_placeholder_terms(presets.get('fields'), FIELD_TERMS_PLACEHOLDER)
    return content
