"""
Celery configuration for the course chat service.

Celery runs the realtime fan-out: services enqueue
chat.tasks.broadcast_room_event after a write commits and a worker publishes
it to the room's Channels group.

Redis serves as both the message broker and result backend. Tasks are
auto-discovered from all installed Django apps.

For more information, see:
https://docs.celeryq.dev/en/stable/django/first-steps-with-django.html
"""

import os

from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

app = Celery("config")

# All Celery settings are prefixed with CELERY_ in settings.py
app.config_from_object("django.conf:settings", namespace="CELERY")

app.autodiscover_tasks()
