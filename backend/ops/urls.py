"""
Operations endpoints.

These endpoints are for infrastructure monitoring and should be
protected at network level (internal only) in production.
"""
from django.urls import path

from ops.metrics import MetricsView

metrics_patterns = [
    path("", MetricsView.as_view(), name="metrics"),
]
