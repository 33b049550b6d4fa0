"""Django project configuration for UMC Media Hub.

Contains the settings modules, URL routing, the Celery application and
the WSGI entry point.
"""

# Import the Celery application as soon as Django starts. Without this
# the shared task registry will not be populated.
from .celery import app as celery_app  # noqa: F401
