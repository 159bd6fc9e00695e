from django.contrib import admin
from django.urls import include, path

from ops.urls import metrics_patterns

urlpatterns = [
    # Operations endpoints (no auth required)
    path("_metrics/", include(metrics_patterns)),

    path("admin/", admin.site.urls),
]
