"""Read-only eligibility scan."""
import logging
from functools import reduce
from operator import or_

from django.utils import timezone

from apps.assets.models import Asset

from .rules import evaluate, render_reason
from .valuation import depreciation_percent, round_currency

logger = logging.getLogger(__name__)


def eligible_queryset(automation_pass, rules, today):
    """Assets in the pass's source statuses that may match a criterion."""
    criteria = automation_pass.criteria(rules)
    prefilter = reduce(or_, (criterion.query(today) for criterion in criteria))
    return (
        Asset.objects
        .filter(status__in=automation_pass.source_statuses)
        .filter(prefilter)
        .order_by('pk')
    )


def find_eligible_assets(automation_pass, rules, today=None):
    """
    Assets a pass would transition right now, in primary-key order.

    The database prefilter is re-checked in Python so that the result is
    exactly the set of assets for which at least one criterion fires.
    """
    today = today or timezone.localdate()
    criteria = automation_pass.criteria(rules)
    eligible = [
        asset for asset in eligible_queryset(automation_pass, rules, today)
        if evaluate(criteria, asset, today)
    ]
    logger.debug('%s: %d eligible assets', automation_pass.name, len(eligible))
    return eligible


def preview_eligible(automation_pass, rules, today=None):
    """Eligible assets with their triggered rules, for review before a run."""
    today = today or timezone.localdate()
    criteria = automation_pass.criteria(rules)
    rate = getattr(rules, 'depreciation_rate_per_year', 0)
    preview = []
    for asset in find_eligible_assets(automation_pass, rules, today):
        triggered = evaluate(criteria, asset, today)
        preview.append({
            'asset': asset,
            'reason': render_reason(triggered),
            'rules': [rule.as_dict() for rule in triggered],
            'depreciation_percent': int(round_currency(depreciation_percent(asset, today, rate))) if rate else 0,
        })
    return preview
