"""
Celery Application Instance

Creates the Celery app instance for use by workers and beat scheduler.
Uses the app factory to ensure all services are properly initialized.

    celery -A celery_app.celery_app worker -Q default,cleanup_queue
    celery -A celery_app.celery_app beat
"""

from app_factory import create_app

# Create Flask app with all services initialized (including dependency container)
flask_app = create_app()

# Get Celery instance from Flask app; the sweep task is registered by the factory
celery_app = flask_app.celery
