# =============================================================================
# Django Project Configuration Package
# =============================================================================
# Settings, URLs, the WSGI application and the Celery app.
#
# The Celery app is imported here so shared_task decorators in
# payments.workers bind to it when Django starts.
# =============================================================================

from config.celery import app as celery_app

__all__ = ("celery_app",)
