"""Language utilities for Aushadh-AI.

This module centralizes the summary languages returned by the model
(the "Bhashini" summary). Keeping it in the domain layer allows the CLI,
the report renderer and the speech adapter to share a single source of
truth without creating circular imports with adapters.
"""

from __future__ import annotations

from enum import Enum


_LABELS: dict[str, str] = {
    "en": "English",
    "hi": "Hindi (हिंदी)",
    "te": "Telugu (తెలుగు)",
    "ta": "Tamil (தமிழ்)",
    "kn": "Kannada (ಕನ್ನಡ)",
    "bn": "Bengali (বাংলা)",
    "mr": "Marathi (मराठी)",
}


class SummaryLanguage(str, Enum):
    """Languages available in the multilingual prescription summary."""

    ENGLISH = "en"
    HINDI = "hi"
    TELUGU = "te"
    TAMIL = "ta"
    KANNADA = "kn"
    BENGALI = "bn"
    MARATHI = "mr"

    @classmethod
    def default(cls) -> "SummaryLanguage":
        """Return the default language used across the application."""

        return cls.ENGLISH

    @classmethod
    def codes(cls) -> list[str]:
        return [lang.value for lang in cls]

    def label(self) -> str:
        """Human readable label for selectors and reports."""

        return _LABELS[self.value]
