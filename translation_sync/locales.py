"""Locale code helpers shared by the coverage and download steps."""
from typing import List, Union

ReviewedOnly = Union[bool, List[str]]


def to_remote_code(locale: str) -> str:
    """Convert a hyphenated locale code (``pt-BR``) to the Transifex form (``pt_BR``)."""
    return locale.replace('-', '_')


def from_remote_code(code: str) -> str:
    """Convert a Transifex locale code (``pt_BR``) to the hyphenated form (``pt-BR``)."""
    return code.replace('_', '-')


def is_reviewed_only(locale: str, reviewed_only: ReviewedOnly) -> bool:
    """
    Decide whether only reviewed strings count for a locale.

    ``reviewed_only`` is either a flag applying to every locale or a list of
    locale codes. List entries may be written in either form, so ``pt-BR``
    and ``pt_BR`` both match the locale ``pt-BR``.

    Args:
        locale: The locale code, in either form.
        reviewed_only: The configured reviewed-only setting.

    Returns:
        True if reviewed translations should be used for this locale.
    """
    if not reviewed_only:
        return False
    if isinstance(reviewed_only, bool):
        return True
    wanted = {from_remote_code(code) for code in reviewed_only}
    return from_remote_code(locale) in wanted
