from typing import Dict, List
from errors import UnsupportedCountry

# Keyed by normalized country name; values are the display names and rates.
VAT_RATES: Dict[str, Dict[str, object]] = {
    "sweden": {"name": "Sweden", "rate": 0.25},
    "germany": {"name": "Germany", "rate": 0.19},
    "france": {"name": "France", "rate": 0.20},
}


def normalize_country(country) -> str:
    """
    Canonical lookup key for a country: surrounding whitespace removed and
    lowercased. Every VAT boundary goes through this function.
    """
    if country is None:
        return ""
    return str(country).strip().lower()


def get_vat_rate(country: str) -> float:
    """
    Args:
        country: Country name in any letter casing.

    Returns:
        The VAT rate as a fraction (0.25 for 25%).

    Raises:
        UnsupportedCountry: The country is not in the rate table.
    """
    entry = VAT_RATES.get(normalize_country(country))
    if entry is None:
        raise UnsupportedCountry(country, supported_countries())
    return entry["rate"]


def is_country_supported(country: str) -> bool:
    return normalize_country(country) in VAT_RATES


def canonical_country(country: str) -> str:
    """
    Returns the display name stored for a supported country ('sweden ' -> 'Sweden').

    Raises:
        UnsupportedCountry: The country is not in the rate table.
    """
    entry = VAT_RATES.get(normalize_country(country))
    if entry is None:
        raise UnsupportedCountry(country, supported_countries())
    return entry["name"]


def supported_countries() -> List[str]:
    return [entry["name"] for entry in VAT_RATES.values()]
