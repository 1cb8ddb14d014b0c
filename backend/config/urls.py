from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/auth/', include('apps.accounts.urls')),
    path('api/assets/', include('apps.assets.urls')),
    path('api/', include('apps.lifecycle.urls')),
]
