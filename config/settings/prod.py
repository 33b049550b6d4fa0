"""Production settings for UMC Media Hub.

Extends the base settings for production. Sensitive values must be
provided via environment variables.
"""

from .base import *  # noqa: F401,F403

DEBUG = False

SECRET_KEY = get_env('DJANGO_SECRET_KEY', required=True)  # noqa: F405
ALLOWED_HOSTS = get_list('DJANGO_ALLOWED_HOSTS')  # noqa: F405

MIDTRANS_SERVER_KEY = get_env('MIDTRANS_SERVER_KEY', required=True)  # noqa: F405

# Configure secure proxies and cookies
CSRF_COOKIE_SECURE = True
SESSION_COOKIE_SECURE = True
SECURE_PROXY_SSL_HEADER = ('HTTP_X_FORWARDED_PROTO', 'https')

EMAIL_BACKEND = 'django.core.mail.backends.smtp.EmailBackend'
