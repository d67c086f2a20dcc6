import gettext
import locale
import os
from typing import Callable, Optional

class LocalizationManager:
    def __init__(self, language_code: Optional[str] = None):
        self.locales_dir = os.path.join(os.path.dirname(__file__), 'locales')
        self.language_code = language_code
        self.translator: Callable[[str], str] = self._get_translator()

    def _get_translator(self) -> Callable[[str], str]:
        """
        Gets a translator function for the configured language.
        Falls back to a null translator if the language is not found.
        """
        lang_code = self.language_code
        if lang_code is None or lang_code.lower() == 'system':
            try:
                lang_code = locale.getlocale()[0] or 'en'
            except ValueError:
                lang_code = 'en'
            lang_code = lang_code.split('_')[0]

        try:
            return gettext.translation(
                'portprobe',
                localedir=self.locales_dir,
                languages=[lang_code]
            ).gettext
        except FileNotFoundError:
            return gettext.NullTranslations().gettext

def get_translator(language_code: Optional[str] = None) -> Callable[[str], str]:
    """Initializes and returns a translator function."""
    return LocalizationManager(language_code).translator
