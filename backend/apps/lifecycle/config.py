"""
Rule configuration for the automation passes.

Each pass has its own immutable rules object. Defaults come from
``settings.ASSET_AUTOMATION``; overrides saved through ``update_rules`` are
stored in ``AutomationSettings`` and merged over the defaults every time the
rules are loaded, so no process-wide mutable state is kept.
"""
import dataclasses
import logging
import re
from dataclasses import dataclass, field
from typing import Tuple

from django.conf import settings
from django.db import transaction

from .exceptions import InvalidRules, UnknownJob

logger = logging.getLogger(__name__)

PASS_DISPOSAL_MARKING = 'disposal_marking'
PASS_DEAD_STOCK = 'dead_stock'
PASS_DISPOSAL = 'disposal'

# Legacy camelCase payload names that do not map by case conversion.
KEY_ALIASES = {
    'maxAgeInYears': 'max_age_years',
    'poorConditionAge': 'poor_condition_age_years',
}


@dataclass(frozen=True)
class DisposalMarkingRules:
    """Thresholds for marking active assets as Ready for Scrap."""
    max_age_years: int = 7
    max_depreciation_percent: float = 90
    min_days_since_last_use: int = 365
    auto_mark_conditions: Tuple[str, ...] = ('beyond_repair', 'obsolete')
    min_purchase_cost_for_check: float = 1000
    depreciation_rate_per_year: float = 10
    auto_approve: bool = False
    notify_roles: Tuple[str, ...] = ('admin', 'inventory_manager', 'it_manager')


@dataclass(frozen=True)
class DeadStockRules:
    """Thresholds for moving in-service assets to dead stock."""
    max_age_years: int = 5
    poor_condition_age_years: int = 2
    no_maintenance_months: int = 24
    damage_conditions: Tuple[str, ...] = ('poor', 'damaged')
    stale_maintenance_conditions: Tuple[str, ...] = ('poor', 'fair')
    notify_roles: Tuple[str, ...] = ('admin', 'inventory_manager')


@dataclass(frozen=True)
class DisposalRules:
    """Thresholds for disposing of assets that sat in dead stock."""
    days_in_dead_stock: int = 90
    depreciation_rate_per_year: float = 15
    auto_approve: bool = False
    notify_roles: Tuple[str, ...] = ('admin', 'inventory_manager')
    condition_multipliers: dict = field(default_factory=lambda: {
        'excellent': 0.20,
        'good': 0.15,
        'fair': 0.10,
        'poor': 0.05,
        'damaged': 0.05,
    })


RULE_CLASSES = {
    PASS_DISPOSAL_MARKING: DisposalMarkingRules,
    PASS_DEAD_STOCK: DeadStockRules,
    PASS_DISPOSAL: DisposalRules,
}


def snake_case(key):
    if key in KEY_ALIASES:
        return KEY_ALIASES[key]
    return re.sub(r'(?<!^)(?=[A-Z])', '_', key).lower()


def normalize_keys(data):
    """Accept camelCase payload keys alongside snake_case ones."""
    return {snake_case(key): value for key, value in (data or {}).items()}


def build_rules(pass_name, values):
    """Instantiate the rules class for a pass, ignoring unknown keys."""
    try:
        rules_class = RULE_CLASSES[pass_name]
    except KeyError:
        raise UnknownJob(f'Unknown automation pass "{pass_name}"') from None

    known = {f.name for f in dataclasses.fields(rules_class)}
    kwargs = {}
    for key, value in normalize_keys(values).items():
        if key not in known:
            continue
        if isinstance(value, list):
            value = tuple(value)
        kwargs[key] = value
    return rules_class(**kwargs)


def rules_to_dict(rules):
    data = dataclasses.asdict(rules)
    return {key: list(value) if isinstance(value, tuple) else value for key, value in data.items()}


def default_values(pass_name):
    return dict(getattr(settings, 'ASSET_AUTOMATION', {}).get(pass_name, {}))


def merge_values(base, changes):
    """Layer ``changes`` over ``base``; mapping values are merged one level deep."""
    merged = dict(base)
    for key, value in changes.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            value = {**merged[key], **value}
        merged[key] = value
    return merged


def load_rules(pass_name):
    """Rules for a pass: settings defaults merged with stored overrides."""
    from .models import AutomationSettings

    values = merge_values(
        rules_to_dict(build_rules(pass_name, {})),
        normalize_keys(default_values(pass_name)),
    )
    stored = AutomationSettings.objects.filter(pass_name=pass_name).first()
    if stored:
        values = merge_values(values, stored.overrides)
    return build_rules(pass_name, values)


def validate_rules(pass_name, changes):
    """Validated snake_case values of a partial update; raises InvalidRules."""
    from .serializers import RULE_SERIALIZERS

    if pass_name not in RULE_SERIALIZERS:
        raise UnknownJob(f'Unknown automation pass "{pass_name}"')

    serializer = RULE_SERIALIZERS[pass_name](data=normalize_keys(changes), partial=True)
    if not serializer.is_valid():
        raise InvalidRules(serializer.errors)
    return dict(serializer.validated_data)


def update_rule_sets(changes_by_pass):
    """
    Validate partial updates for several passes, then persist all of them.

    Nothing is stored unless every update is valid.
    """
    from .models import AutomationSettings

    validated = {}
    errors = {}
    for pass_name, changes in changes_by_pass.items():
        try:
            validated[pass_name] = validate_rules(pass_name, changes)
        except InvalidRules as exc:
            errors[pass_name] = exc.errors
    if errors:
        raise InvalidRules(errors if len(changes_by_pass) > 1 else next(iter(errors.values())))

    with transaction.atomic():
        for pass_name, values in validated.items():
            stored, _ = AutomationSettings.objects.select_for_update().get_or_create(
                pass_name=pass_name,
            )
            stored.overrides = merge_values(stored.overrides, values)
            stored.save(update_fields=['overrides', 'updated_at'])

    updated = {}
    for pass_name in validated:
        updated[pass_name] = load_rules(pass_name)
        logger.info('Automation rules for %s updated: %s', pass_name, rules_to_dict(updated[pass_name]))
    return updated


def update_rules(pass_name, changes):
    """Validate a partial update, persist it and return the merged rules."""
    return update_rule_sets({pass_name: changes})[pass_name]
