from typing import Iterable
from services.vat import get_vat_rate


def remaining_factor(percents: Iterable[float]) -> float:
    """
    Share of the price left after applying every discount in sequence.

    Each discount applies to the already discounted price, so the factors
    multiply: 10% and 5% leave 0.90 * 0.95 = 0.855 of the price.

    Args:
        percents: Discount percentages, each in (0, 100].

    Returns:
        The product of (1 - d/100) over all discounts, 1.0 when there are none.
    """
    factor = 1.0
    for percent in percents:
        factor *= 1 - float(percent) / 100
    return factor


def total_discount_percent(percents: Iterable[float]) -> float:
    """
    Combined discount expressed as a single percentage.

    Returns:
        (1 - remaining_factor) * 100; 0.0 for an empty set.
    """
    return (1 - remaining_factor(percents)) * 100


def compute_final_price(base_price: float, vat_rate: float, percents: Iterable[float]) -> float:
    """
    Computes the VAT-inclusive price after compound discounts.

    The result does not depend on the order of the discounts.

    Args:
        base_price: Non-negative price before discounts and VAT.
        vat_rate: VAT as a fraction, e.g. 0.25.
        percents: Percentages of the discounts applied to the product.

    Returns:
        base_price * remaining_factor * (1 + vat_rate).
    """
    return float(base_price) * remaining_factor(percents) * (1 + vat_rate)


def price_for_country(base_price: float, country: str, percents: Iterable[float]) -> float:
    """
    Convenience wrapper resolving the VAT rate from the country name.

    Raises:
        UnsupportedCountry: The country is not in the rate table.
    """
    return compute_final_price(base_price, get_vat_rate(country), percents)
