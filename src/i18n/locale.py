import logging
from typing import Optional

from babel import Locale, UnknownLocaleError
from babel.support import NullTranslations, Translations

logger = logging.getLogger('ledger.i18n')

CATALOG_DOMAIN = "ledger"


class LocaleHandle:
    """
    Translation handle for one language.

    ``text()`` looks a message up in the gettext catalog and interpolates
    positional arguments with ``str.format``.
    """

    def __init__(self, locale: Locale, translations: NullTranslations):
        self.locale = locale
        self.translations = translations

    @property
    def language(self) -> str:
        return str(self.locale)

    def text(self, msgid: str, *args) -> str:
        translated = self.translations.gettext(msgid)
        if args:
            return translated.format(*args)
        return translated

    def __repr__(self) -> str:
        return f"LocaleHandle({self.language!r})"


def get_handle(language: Optional[str], locale_dir: str) -> Optional[LocaleHandle]:
    """
    Load the translation handle for a language code such as ``en`` or ``pt-BR``.

    A missing catalog file falls back to untranslated messages; only a language
    code that does not name a known locale yields ``None``.

    Args:
        language: Language code, ``-`` or ``_`` separated
        locale_dir: Directory holding ``<locale>/LC_MESSAGES/ledger.mo`` catalogs

    Returns:
        LocaleHandle, or None when the language cannot be loaded
    """
    if not language:
        return None
    try:
        locale = Locale.parse(language.replace("-", "_"))
    except (UnknownLocaleError, ValueError) as e:
        logger.error(f"Could not parse locale {language!r}: {e}")
        return None

    translations = Translations.load(dirname=locale_dir, locales=[str(locale), locale.language], domain=CATALOG_DOMAIN)
    if type(translations) is NullTranslations:
        logger.debug(f"No '{CATALOG_DOMAIN}' catalog for {locale} in {locale_dir}, using untranslated messages")
    return LocaleHandle(locale, translations)
