"""Human-readable formatting of USD amounts.

Halves round away from zero on the decimal text of the value, the way en-US
number formatting in browsers does (``2.0005`` -> ``2.001``).
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

_COMPACT_UNITS = (
    (Decimal(10) ** 12, "T"),
    (Decimal(10) ** 9, "B"),
    (Decimal(10) ** 6, "M"),
    (Decimal(10) ** 3, "K"),
    (Decimal(1), ""),
)


def format_price(value: float) -> str:
    """Group thousands and keep up to three fraction digits (``67,123.457``)."""
    amount = Decimal(str(value)).quantize(Decimal("0.001"), rounding=ROUND_HALF_UP)
    return _strip_zero(format(amount, ",f"))


def _round_compact(scaled: Decimal) -> Decimal:
    # One fraction digit below 10 units, whole units above ($1.3T, $845B).
    if scaled < 10:
        return scaled.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
    return scaled.quantize(Decimal("1"), rounding=ROUND_HALF_UP)


def format_compact_usd(value: float | None) -> str:
    """Format an amount in short compact currency notation.

    Examples: ``1_330_000_000_000`` -> ``$1.3T``, ``845_200_000_000`` ->
    ``$845B``, ``950`` -> ``$950``. ``None`` renders as ``N/A``.
    """
    if value is None:
        return "N/A"

    amount = Decimal(str(value))
    sign = "-" if amount < 0 else ""
    amount = amount.copy_abs()

    index = next(
        (i for i, (threshold, _) in enumerate(_COMPACT_UNITS) if amount >= threshold),
        len(_COMPACT_UNITS) - 1,
    )
    threshold, suffix = _COMPACT_UNITS[index]
    scaled = _round_compact(amount / threshold)
    # Rounding can carry into the next unit (999.6B -> 1T, 999.96 -> 1K).
    if scaled >= 1000 and index > 0:
        threshold, suffix = _COMPACT_UNITS[index - 1]
        scaled = _round_compact(amount / threshold)
    return f"{sign}${_strip_zero(format(scaled, 'f'))}{suffix}"


def _strip_zero(text: str) -> str:
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text
