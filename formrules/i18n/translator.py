"""
FormRules Translation
=====================

Translators localize the default validation messages before
placeholders are filled in. Anything with a ``translate(text)``
method works; two implementations ship here:

- CatalogTranslator: in-memory catalogs, one per locale
- GettextTranslator: compiled gettext (.mo) catalogs

Example:
    translator = CatalogTranslator({
        "The :attribute field is required.": "Le champ :attribute est obligatoire.",
    })
    validator = Validator(data, rules, translator=translator)
"""

from __future__ import annotations

import gettext
from pathlib import Path
from typing import Dict, Mapping, Optional, Protocol, Sequence, Union, runtime_checkable

from formrules.utils.logger import get_logger

logger = get_logger("formrules.i18n")


@runtime_checkable
class Translator(Protocol):
    """Translates one message template."""

    def translate(self, text: str) -> str:
        ...


class CatalogTranslator:
    """
    Dictionary-backed translator.

    Args:
        catalog: Messages for the active locale
        catalogs: Messages per locale, for switching with ``use()``
        locale: Active locale when ``catalogs`` is given

    Unknown messages are returned unchanged.
    """

    def __init__(
        self,
        catalog: Optional[Mapping[str, str]] = None,
        catalogs: Optional[Mapping[str, Mapping[str, str]]] = None,
        locale: Optional[str] = None,
    ) -> None:
        self._catalogs: Dict[str, Dict[str, str]] = {
            name: dict(messages) for name, messages in (catalogs or {}).items()
        }
        self.locale = locale
        self._catalog: Dict[str, str] = dict(catalog or {})
        if locale is not None:
            self.use(locale)

    def use(self, locale: str) -> "CatalogTranslator":
        """Switch the active locale."""
        if locale not in self._catalogs:
            raise KeyError(f"No catalog for locale '{locale}'")
        self.locale = locale
        self._catalog = self._catalogs[locale]
        return self

    def add(self, source: str, translation: str, locale: Optional[str] = None) -> None:
        """Add one translation to a locale (the active one by default)."""
        if locale is None:
            self._catalog[source] = translation
            return
        self._catalogs.setdefault(locale, {})[source] = translation

    def translate(self, text: str) -> str:
        return self._catalog.get(text, text)


class GettextTranslator:
    """
    Translator over gettext catalogs.

    Looks for ``<localedir>/<lang>/LC_MESSAGES/<domain>.mo``; with no
    matching catalog every message is returned unchanged.
    """

    def __init__(
        self,
        domain: str = "formrules",
        localedir: Optional[Union[str, Path]] = None,
        languages: Optional[Sequence[str]] = None,
    ) -> None:
        self.domain = domain
        self._translations = gettext.translation(
            domain,
            localedir=str(localedir) if localedir is not None else None,
            languages=list(languages) if languages else None,
            fallback=True,
        )
        if isinstance(self._translations, gettext.NullTranslations) and not isinstance(
            self._translations, gettext.GNUTranslations
        ):
            logger.debug("No gettext catalog found", domain=domain, languages=languages)

    def translate(self, text: str) -> str:
        return self._translations.gettext(text)
