"""
Celery configuration for the billing service.

Celery runs the settlement sweeps outside the request cycle:
- Message refunds for volleys left unanswered past the reply deadline
- Earnings maturation once the 48 hour hold has passed
- Weekly payouts of available earnings to connected accounts

Redis is both broker and result backend. Schedules are stored by
django-celery-beat (DatabaseScheduler) and seeded by a data migration in
payments. Tasks are auto-discovered from each installed app's tasks.py.

Usage:
    celery -A config worker -l info
    celery -A config beat -l info

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
