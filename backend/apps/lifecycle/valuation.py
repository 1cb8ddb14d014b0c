"""
Value computations used by the automation passes.

Straight-line depreciation with a per-pass annual rate, current value,
disposal value and disposal method.
"""
from decimal import Decimal, ROUND_HALF_UP

from apps.assets.models import Asset, DisposalRecord

DAYS_PER_YEAR = Decimal('365')
HUNDRED = Decimal('100')
ZERO = Decimal('0')

FLAT_DISPOSAL_SHARE = Decimal('0.1')
DEFAULT_CONDITION_MULTIPLIER = Decimal('0.05')
AUCTION_COST_THRESHOLD = Decimal('50000')


def to_decimal(value):
    if value is None:
        return None
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def days_between(earlier, today):
    """Whole days from ``earlier`` to ``today``; None when ``earlier`` is missing."""
    if earlier is None:
        return None
    return (today - earlier).days


def age_in_years(asset, today):
    """Asset age in 365-day years, or None without a purchase date."""
    days = days_between(asset.purchase_date, today)
    if days is None:
        return None
    return Decimal(days) / DAYS_PER_YEAR


def depreciation_percent(asset, today, rate_per_year):
    """
    Straight-line depreciation percent, bounded to [0, 100].

    Assets without a purchase date or a purchase cost are not depreciated.
    """
    if asset.purchase_date is None or not asset.purchase_cost:
        return ZERO
    percent = age_in_years(asset, today) * to_decimal(rate_per_year)
    return min(HUNDRED, max(ZERO, percent))


def current_value(asset, percent):
    if not asset.purchase_cost:
        return ZERO
    return to_decimal(asset.purchase_cost) * (1 - percent / HUNDRED)


def round_currency(amount):
    return amount.quantize(Decimal('1'), rounding=ROUND_HALF_UP)


def flat_disposal_value(asset, percent):
    """10% of the current value, used when marking assets for disposal."""
    return round_currency(current_value(asset, percent) * FLAT_DISPOSAL_SHARE)


def condition_disposal_value(asset, percent, multipliers):
    """Current value scaled by a condition-keyed multiplier."""
    multiplier = multipliers.get(asset.condition)
    multiplier = to_decimal(multiplier) if multiplier is not None else DEFAULT_CONDITION_MULTIPLIER
    return round_currency(current_value(asset, percent) * multiplier)


def disposal_method(asset):
    """
    Disposal method for the lifecycle disposal stage. First match wins:
    damaged, high purchase cost, electronics, poor condition, then donation.
    """
    if asset.condition == Asset.Condition.DAMAGED:
        return DisposalRecord.Method.RECYCLING
    if asset.purchase_cost and to_decimal(asset.purchase_cost) > AUCTION_COST_THRESHOLD:
        return DisposalRecord.Method.AUCTION
    if 'electronics' in (asset.category or '').lower():
        return DisposalRecord.Method.RECYCLING
    if asset.condition == Asset.Condition.POOR:
        return DisposalRecord.Method.SCRAP
    return DisposalRecord.Method.DONATION
