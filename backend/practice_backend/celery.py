"""
Celery application configuration.

Runs maintenance work that must not live in the web process, currently
the expired party invitation sweep.

Usage:
    # Start worker
    celery -A practice_backend worker -l INFO

    # Start beat scheduler (triggers the daily sweep)
    celery -A practice_backend beat -l INFO
"""
import os

from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "practice_backend.settings")

app = Celery("practice_backend")

# Load config from Django settings
app.config_from_object("django.conf:settings", namespace="CELERY")

# Auto-discover tasks from all installed apps
app.autodiscover_tasks()
