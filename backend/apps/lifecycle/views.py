import logging

from rest_framework import status, viewsets
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.accounts.permissions import IsAdmin, IsManagerOrAdmin, ReadManagerWriteAdmin

from . import scheduler
from .config import (
    PASS_DEAD_STOCK, PASS_DISPOSAL, PASS_DISPOSAL_MARKING,
    load_rules, rules_to_dict, update_rule_sets, update_rules,
)
from .exceptions import InvalidRules, JobAlreadyRunning
from .models import AutomationRun
from .passes import get_pass
from .scanner import preview_eligible
from .serializers import (
    AutomationRunSerializer, EligibleAssetSerializer, LifecycleConfigSerializer,
)

logger = logging.getLogger(__name__)


class TriggerJobView(APIView):
    """Run an automation job synchronously and return its summary."""
    permission_classes = [IsAdmin]
    job = None
    stage = None

    def post(self, request):
        try:
            result = scheduler.trigger_now(self.job, user=request.user, stage=self.stage)
        except JobAlreadyRunning as exc:
            skipped = AutomationRun.objects.filter(
                job=self.job, status=AutomationRun.Status.SKIPPED,
            ).first()
            return Response(
                {
                    'success': False,
                    'error': str(exc),
                    'run': AutomationRunSerializer(skipped).data if skipped else None,
                },
                status=status.HTTP_409_CONFLICT,
            )
        except Exception as exc:
            logger.exception('Manual %s run failed', self.job)
            return Response(
                {'success': False, 'error': str(exc)},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )
        return Response({'success': True, 'data': result})


# --- Lifecycle (dead stock + disposal) -------------------------------------

class LifecycleStatsView(APIView):
    permission_classes = [IsManagerOrAdmin]

    def get(self, request):
        return Response({'success': True, 'data': scheduler.get_stats(scheduler.JOB_LIFECYCLE)})


class LifecycleRunView(TriggerJobView):
    job = scheduler.JOB_LIFECYCLE


class DeadStockRunView(TriggerJobView):
    job = scheduler.JOB_LIFECYCLE
    stage = PASS_DEAD_STOCK


class DisposalStageRunView(TriggerJobView):
    job = scheduler.JOB_LIFECYCLE
    stage = PASS_DISPOSAL


class LifecycleConfigView(APIView):
    """Rules of both lifecycle stages."""
    permission_classes = [ReadManagerWriteAdmin]

    def _payload(self):
        return {
            PASS_DEAD_STOCK: rules_to_dict(load_rules(PASS_DEAD_STOCK)),
            PASS_DISPOSAL: rules_to_dict(load_rules(PASS_DISPOSAL)),
        }

    def get(self, request):
        return Response({'success': True, 'data': self._payload()})

    def put(self, request):
        serializer = LifecycleConfigSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            update_rule_sets(serializer.validated_data)
        except InvalidRules as exc:
            return Response({'success': False, 'errors': exc.errors}, status=status.HTTP_400_BAD_REQUEST)
        return Response({'success': True, 'data': self._payload()})


# --- Disposal marking -------------------------------------------------------

class DisposalStatsView(APIView):
    permission_classes = [IsManagerOrAdmin]

    def get(self, request):
        return Response({'success': True, 'data': scheduler.get_stats(scheduler.JOB_DISPOSAL_MARKING)})


class DisposalRunView(TriggerJobView):
    job = scheduler.JOB_DISPOSAL_MARKING


class DisposalRulesView(APIView):
    permission_classes = [ReadManagerWriteAdmin]

    def get(self, request):
        rules = load_rules(PASS_DISPOSAL_MARKING)
        return Response({'success': True, 'data': rules_to_dict(rules)})

    def put(self, request):
        try:
            rules = update_rules(PASS_DISPOSAL_MARKING, request.data)
        except InvalidRules as exc:
            return Response({'success': False, 'errors': exc.errors}, status=status.HTTP_400_BAD_REQUEST)
        return Response({'success': True, 'data': rules_to_dict(rules)})


class EligibleAssetsView(APIView):
    """Assets the next disposal marking run would pick up."""
    permission_classes = [IsManagerOrAdmin]

    def get(self, request):
        automation_pass = get_pass(PASS_DISPOSAL_MARKING)
        preview = preview_eligible(automation_pass, load_rules(PASS_DISPOSAL_MARKING))
        return Response({
            'success': True,
            'count': len(preview),
            'data': EligibleAssetSerializer(preview, many=True).data,
        })


# --- Scheduler --------------------------------------------------------------

class SchedulerStatusView(APIView):
    permission_classes = [IsManagerOrAdmin]

    def get(self, request):
        return Response({'success': True, 'data': scheduler.get_status()})


class AutomationRunViewSet(viewsets.ReadOnlyModelViewSet):
    """Run log of the automation jobs."""
    queryset = AutomationRun.objects.select_related('triggered_by')
    serializer_class = AutomationRunSerializer
    permission_classes = [IsManagerOrAdmin]
    filterset_fields = ['job', 'status', 'trigger']
    ordering_fields = ['started_at']
