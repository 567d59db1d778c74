"""
FormRules Translation
=====================

Translators for default validation messages.
"""

from formrules.i18n.translator import CatalogTranslator, GettextTranslator, Translator

__all__ = ["Translator", "CatalogTranslator", "GettextTranslator"]
