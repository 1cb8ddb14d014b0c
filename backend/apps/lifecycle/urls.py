from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

router = DefaultRouter()
router.register(r'automation/runs', views.AutomationRunViewSet, basename='automation-runs')

urlpatterns = [
    path('lifecycle/stats/', views.LifecycleStatsView.as_view(), name='lifecycle-stats'),
    path('lifecycle/run/', views.LifecycleRunView.as_view(), name='lifecycle-run'),
    path('lifecycle/dead-stock/', views.DeadStockRunView.as_view(), name='lifecycle-dead-stock'),
    path('lifecycle/disposal/', views.DisposalStageRunView.as_view(), name='lifecycle-disposal'),
    path('lifecycle/config/', views.LifecycleConfigView.as_view(), name='lifecycle-config'),
    path('disposal/stats/', views.DisposalStatsView.as_view(), name='disposal-stats'),
    path('disposal/run/', views.DisposalRunView.as_view(), name='disposal-run'),
    path('disposal/rules/', views.DisposalRulesView.as_view(), name='disposal-rules'),
    path('disposal/eligible-assets/', views.EligibleAssetsView.as_view(), name='disposal-eligible-assets'),
    path('automation/scheduler/status/', views.SchedulerStatusView.as_view(), name='scheduler-status'),
    path('', include(router.urls)),
]
