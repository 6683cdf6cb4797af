"""
Message translation for sysinventory.
Catalogs live under ``locales/<lang>/LC_MESSAGES/sysinventory.mo``.
"""

import gettext
import os
from typing import Dict, Optional

DEFAULT_LANGUAGE = "en"

DOMAIN = "sysinventory"

_state = {"language": DEFAULT_LANGUAGE}

# Loaded catalogs keyed by language code
TRANSLATIONS: Dict[str, gettext.NullTranslations] = {}


def set_language(language: str) -> None:
    """Select the language used by subsequent lookups."""
    _state["language"] = language or DEFAULT_LANGUAGE


def get_language() -> str:
    """Return the currently selected language."""
    return _state["language"]


def get_translation(language: Optional[str] = None) -> gettext.NullTranslations:
    """Return the (cached) catalog for a language, English when none is installed."""
    if language is None:
        language = get_language()

    if language not in TRANSLATIONS:
        localedir = os.path.join(os.path.dirname(__file__), "locales")
        try:
            TRANSLATIONS[language] = gettext.translation(DOMAIN, localedir, [language])
        except FileNotFoundError:
            TRANSLATIONS[language] = gettext.NullTranslations()

    return TRANSLATIONS[language]


def _(message: str, language: Optional[str] = None) -> str:
    """Translate a message."""
    return get_translation(language).gettext(message)


def ngettext(
    singular: str, plural: str, count: int, language: Optional[str] = None
) -> str:
    """Translate a message with plural forms."""
    return get_translation(language).ngettext(singular, plural, count)
