# raqam/preferences.py
"""Canonical preference tokens, their display labels, and legacy normalization.

Earlier app versions persisted the human-readable label of the chosen option
(Arabic or English) instead of the token. Reads go through the ``normalize_*``
functions, which accept either form and fall back to the defaults for
anything else. Writes always store the token.
"""
from typing import Dict, List, Optional
from .schemas import (
    AppPreferences,
    ColorScheme,
    CurrencyPreference,
    LanguagePreference,
    LocationPreference,
    ThemePreference,
)

DEFAULT_PREFERENCES = AppPreferences(language="ar", currency="sar", location="riyadh")

THEME_PREFERENCES = ("light", "dark", "system")

# display language -> token -> label
LANGUAGE_LABELS: Dict[str, Dict[str, str]] = {
    "ar": {"ar": "العربية", "en": "English"},
    "en": {"ar": "العربية", "en": "English"},
}

CURRENCY_LABELS: Dict[str, Dict[str, str]] = {
    "ar": {
        "sar": "ريال سعودي",
        "aed": "درهم إماراتي",
        "usd": "دولار أمريكي",
        "jod": "دينار أردني",
    },
    "en": {
        "sar": "Saudi Riyal",
        "aed": "UAE Dirham",
        "usd": "US Dollar",
        "jod": "Jordanian Dinar",
    },
}

LOCATION_LABELS: Dict[str, Dict[str, str]] = {
    "ar": {
        "riyadh": "الرياض",
        "jeddah": "جدة",
        "dammam": "الدمام",
        "mecca": "مكة",
    },
    "en": {
        "riyadh": "Riyadh",
        "jeddah": "Jeddah",
        "dammam": "Dammam",
        "mecca": "Mecca",
    },
}


def _legacy_lookup(labels: Dict[str, Dict[str, str]]) -> Dict[str, str]:
    lookup = {}
    for by_token in labels.values():
        for token, label in by_token.items():
            lookup[token] = token
            lookup[label] = token
    return lookup


_LANGUAGE_LOOKUP = _legacy_lookup(LANGUAGE_LABELS)
_CURRENCY_LOOKUP = _legacy_lookup(CURRENCY_LABELS)
_LOCATION_LOOKUP = _legacy_lookup(LOCATION_LABELS)


def _normalize(lookup: Dict[str, str], value, default: str) -> str:
    if not isinstance(value, str):
        return default
    return lookup.get(value, default)


def normalize_language(value: Optional[str]) -> LanguagePreference:
    return _normalize(_LANGUAGE_LOOKUP, value, DEFAULT_PREFERENCES.language)


def normalize_currency(value: Optional[str]) -> CurrencyPreference:
    return _normalize(_CURRENCY_LOOKUP, value, DEFAULT_PREFERENCES.currency)


def normalize_location(value: Optional[str]) -> LocationPreference:
    return _normalize(_LOCATION_LOOKUP, value, DEFAULT_PREFERENCES.location)


def normalize_theme(value: Optional[str]) -> Optional[ThemePreference]:
    """Stored theme token, or None when nothing valid is stored."""
    return value if value in THEME_PREFERENCES else None


def get_language_label(display: LanguagePreference, value: LanguagePreference) -> str:
    return LANGUAGE_LABELS[display][value]


def get_currency_label(display: LanguagePreference, value: CurrencyPreference) -> str:
    return CURRENCY_LABELS[display][value]


def get_location_label(display: LanguagePreference, value: LocationPreference) -> str:
    return LOCATION_LABELS[display][value]


def _options(labels: Dict[str, Dict[str, str]], display: str) -> List[Dict[str, str]]:
    return [{"label": label, "value": token} for token, label in labels[display].items()]


def get_language_options(display: LanguagePreference) -> List[Dict[str, str]]:
    return _options(LANGUAGE_LABELS, display)


def get_currency_options(display: LanguagePreference) -> List[Dict[str, str]]:
    return _options(CURRENCY_LABELS, display)


def get_location_options(display: LanguagePreference) -> List[Dict[str, str]]:
    return _options(LOCATION_LABELS, display)


def resolve_color_scheme(
    preference: Optional[ThemePreference],
    system_scheme: Optional[ColorScheme] = None,
) -> ColorScheme:
    """Explicit light/dark wins; "system" or unset follows the platform, else light."""
    if preference in ("light", "dark"):
        return preference
    return system_scheme or "light"
