from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

router = DefaultRouter()
router.register(r'items', views.AssetViewSet, basename='assets')
router.register(r'disposal-records', views.DisposalRecordViewSet, basename='disposal-records')
router.register(r'audit-log', views.AuditLogViewSet, basename='audit-log')
router.register(r'notifications', views.NotificationViewSet, basename='notifications')

urlpatterns = [
    path('', include(router.urls)),
]
