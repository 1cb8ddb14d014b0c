"""
Eligibility criteria.

Every criterion is a (predicate, formatter) pair: ``query`` narrows the
database scan, ``match`` re-checks a single asset and returns a
``TriggeredRule`` describing why it fired. The reason shown to users is
rendered from the list of triggered rules only at the boundary.
"""
from dataclasses import dataclass
from decimal import Decimal

from dateutil.relativedelta import relativedelta
from django.db.models import Q

from .valuation import age_in_years, days_between, depreciation_percent, to_decimal

DEFAULT_REASON = 'Automated criteria met'


@dataclass(frozen=True)
class TriggeredRule:
    name: str
    value: str

    def __str__(self):
        return f'{self.name}: {self.value}'

    def as_dict(self):
        return {'rule': self.name, 'value': self.value}


class Criterion:
    name = ''

    def query(self, today):
        raise NotImplementedError

    def match(self, asset, today):
        raise NotImplementedError


class ConditionCriterion(Criterion):
    """Condition is one of the configured values."""
    name = 'Condition'

    def __init__(self, conditions, min_age_years=None):
        self.conditions = tuple(conditions)
        self.min_age_years = min_age_years

    def _age_cutoff(self, today):
        return today - relativedelta(years=self.min_age_years)

    def query(self, today):
        q = Q(condition__in=self.conditions)
        if self.min_age_years is not None:
            q &= Q(purchase_date__isnull=False, purchase_date__lte=self._age_cutoff(today))
        return q

    def match(self, asset, today):
        if asset.condition not in self.conditions:
            return None
        if self.min_age_years is not None:
            if asset.purchase_date is None or asset.purchase_date > self._age_cutoff(today):
                return None
        return TriggeredRule(self.name, asset.get_condition_display())


class AgeCriterion(Criterion):
    """Purchased at least ``max_age_years`` calendar years ago, with a known cost."""
    name = 'Age'

    def __init__(self, max_age_years, min_purchase_cost=None):
        self.max_age_years = max_age_years
        self.min_purchase_cost = min_purchase_cost

    def _cutoff(self, today):
        return today - relativedelta(years=self.max_age_years)

    def query(self, today):
        q = Q(
            purchase_date__isnull=False,
            purchase_date__lte=self._cutoff(today),
            purchase_cost__isnull=False,
        )
        if self.min_purchase_cost is not None:
            q &= Q(purchase_cost__gte=self.min_purchase_cost)
        return q

    def match(self, asset, today):
        if asset.purchase_date is None or asset.purchase_date > self._cutoff(today):
            return None
        if asset.purchase_cost is None:
            return None
        if self.min_purchase_cost is not None:
            if to_decimal(asset.purchase_cost) < to_decimal(self.min_purchase_cost):
                return None
        return TriggeredRule(self.name, f'{age_in_years(asset, today):.1f} years')


class DepreciationCriterion(Criterion):
    """Straight-line depreciation reached the configured percent."""
    name = 'Depreciation'

    def __init__(self, threshold_percent, rate_per_year, min_purchase_cost=None):
        self.threshold_percent = to_decimal(threshold_percent)
        self.rate_per_year = rate_per_year
        self.min_purchase_cost = min_purchase_cost

    def query(self, today):
        q = Q(purchase_date__isnull=False, purchase_cost__isnull=False)
        if self.min_purchase_cost is not None:
            q &= Q(purchase_cost__gte=self.min_purchase_cost)
        return q

    def match(self, asset, today):
        if asset.purchase_date is None or not asset.purchase_cost:
            return None
        if self.min_purchase_cost is not None and to_decimal(asset.purchase_cost) < to_decimal(self.min_purchase_cost):
            return None
        percent = depreciation_percent(asset, today, self.rate_per_year)
        if percent < self.threshold_percent:
            return None
        return TriggeredRule(self.name, f'{percent.quantize(Decimal("1"))}%')


class AuditRecencyCriterion(Criterion):
    """Not audited for at least ``min_days`` days."""
    name = 'Not audited'

    def __init__(self, min_days):
        self.min_days = min_days

    def query(self, today):
        return Q(
            last_audit_date__isnull=False,
            last_audit_date__lte=today - relativedelta(days=self.min_days),
        )

    def match(self, asset, today):
        days = days_between(asset.last_audit_date, today)
        if days is None or days < self.min_days:
            return None
        return TriggeredRule(self.name, f'{days // 30} months')


class MaintenanceRecencyCriterion(Criterion):
    """No maintenance for ``months`` months while in a worn condition."""
    name = 'No maintenance'

    def __init__(self, months, conditions):
        self.months = months
        self.conditions = tuple(conditions)

    def _cutoff(self, today):
        return today - relativedelta(months=self.months)

    def query(self, today):
        return Q(
            last_maintenance_date__isnull=False,
            last_maintenance_date__lte=self._cutoff(today),
            condition__in=self.conditions,
        )

    def match(self, asset, today):
        if asset.last_maintenance_date is None or asset.condition not in self.conditions:
            return None
        if asset.last_maintenance_date > self._cutoff(today):
            return None
        months = days_between(asset.last_maintenance_date, today) // 30
        return TriggeredRule(self.name, f'{months} months')


class DeadStockDurationCriterion(Criterion):
    """Reviewed into dead stock at least ``days`` days ago."""
    name = 'In dead stock'

    def __init__(self, days):
        self.days = days

    def query(self, today):
        return Q(
            last_audit_date__isnull=False,
            last_audit_date__lte=today - relativedelta(days=self.days),
        )

    def match(self, asset, today):
        days = days_between(asset.last_audit_date, today)
        if days is None or days < self.days:
            return None
        return TriggeredRule(self.name, f'{days} days')


def evaluate(criteria, asset, today):
    """Triggered rules for an asset, in criteria order."""
    triggered = []
    for criterion in criteria:
        hit = criterion.match(asset, today)
        if hit is not None:
            triggered.append(hit)
    return triggered


def render_reason(triggered, default=DEFAULT_REASON):
    return ', '.join(str(rule) for rule in triggered) or default
