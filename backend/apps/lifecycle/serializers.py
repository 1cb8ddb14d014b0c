from rest_framework import serializers

from apps.accounts.models import User
from apps.assets.models import Asset
from apps.assets.serializers import AssetListSerializer

from .config import PASS_DEAD_STOCK, PASS_DISPOSAL, PASS_DISPOSAL_MARKING
from .models import AutomationRun


def condition_list(**kwargs):
    return serializers.ListField(
        child=serializers.ChoiceField(choices=Asset.Condition.choices), **kwargs
    )


def role_list(**kwargs):
    return serializers.ListField(
        child=serializers.ChoiceField(choices=User.Role.choices), **kwargs
    )


class DisposalMarkingRulesSerializer(serializers.Serializer):
    max_age_years = serializers.IntegerField(min_value=1, max_value=50)
    max_depreciation_percent = serializers.FloatField(min_value=50, max_value=100)
    min_days_since_last_use = serializers.IntegerField(min_value=1)
    auto_mark_conditions = condition_list()
    min_purchase_cost_for_check = serializers.FloatField(min_value=0)
    depreciation_rate_per_year = serializers.FloatField(min_value=0, max_value=100)
    auto_approve = serializers.BooleanField()
    notify_roles = role_list(allow_empty=False)


class DeadStockRulesSerializer(serializers.Serializer):
    max_age_years = serializers.IntegerField(min_value=1, max_value=50)
    poor_condition_age_years = serializers.IntegerField(min_value=0, max_value=50)
    no_maintenance_months = serializers.IntegerField(min_value=1)
    damage_conditions = condition_list(allow_empty=False)
    stale_maintenance_conditions = condition_list()
    notify_roles = role_list(allow_empty=False)


class DisposalRulesSerializer(serializers.Serializer):
    days_in_dead_stock = serializers.IntegerField(min_value=1)
    depreciation_rate_per_year = serializers.FloatField(min_value=0, max_value=100)
    auto_approve = serializers.BooleanField()
    notify_roles = role_list(allow_empty=False)
    condition_multipliers = serializers.DictField(
        child=serializers.FloatField(min_value=0, max_value=1)
    )

    def validate_condition_multipliers(self, value):
        unknown = set(value) - set(Asset.Condition.values)
        if unknown:
            raise serializers.ValidationError(f'Unknown conditions: {", ".join(sorted(unknown))}')
        return value


RULE_SERIALIZERS = {
    PASS_DISPOSAL_MARKING: DisposalMarkingRulesSerializer,
    PASS_DEAD_STOCK: DeadStockRulesSerializer,
    PASS_DISPOSAL: DisposalRulesSerializer,
}


class LifecycleConfigSerializer(serializers.Serializer):
    """Payload of PUT /lifecycle/config/: either or both stages."""
    dead_stock = serializers.DictField(required=False)
    disposal = serializers.DictField(required=False)

    def to_internal_value(self, data):
        if not hasattr(data, 'get'):
            return super().to_internal_value(data)
        data = {
            'dead_stock': data.get('dead_stock', data.get('deadStock')),
            'disposal': data.get('disposal'),
        }
        return super().to_internal_value({k: v for k, v in data.items() if v is not None})

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError('Provide "dead_stock" and/or "disposal" settings.')
        return attrs


class AutomationRunSerializer(serializers.ModelSerializer):
    job_display = serializers.CharField(source='get_job_display', read_only=True)
    triggered_by_name = serializers.CharField(
        source='triggered_by.username', read_only=True, default=''
    )
    duration = serializers.FloatField(read_only=True)

    class Meta:
        model = AutomationRun
        fields = [
            'id', 'job', 'job_display', 'stage', 'trigger', 'triggered_by',
            'triggered_by_name', 'status', 'summary', 'error',
            'started_at', 'finished_at', 'duration',
        ]
        read_only_fields = fields


class EligibleAssetSerializer(serializers.Serializer):
    asset = AssetListSerializer()
    reason = serializers.CharField()
    rules = serializers.ListField(child=serializers.DictField())
    depreciation_percent = serializers.IntegerField()
