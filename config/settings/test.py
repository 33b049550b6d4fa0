"""Test settings for UMC Media Hub.

SQLite in memory, Celery tasks executed eagerly, emails kept in memory
and fixed Midtrans credentials so signatures can be computed in tests.
"""

from .base import *  # noqa: F401,F403

DEBUG = False

SECRET_KEY = 'test-secret-key'
ALLOWED_HOSTS = ['*']

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']

EMAIL_BACKEND = 'django.core.mail.backends.locmem.EmailBackend'

CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_BROKER_URL = 'memory://'
CELERY_RESULT_BACKEND = 'cache+memory://'

STORAGES = {
    'default': {'BACKEND': 'django.core.files.storage.FileSystemStorage'},
    'staticfiles': {'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage'},
}

MIDTRANS_SERVER_KEY = 'SB-Mid-server-test'
MIDTRANS_CLIENT_KEY = 'SB-Mid-client-test'
MIDTRANS_IS_PRODUCTION = False
MIDTRANS_VERIFY_SIGNATURE = True

FRONTEND_URL = 'http://frontend.test'
BASE_APP_URL = 'http://app.test'
ADMIN_EMAILS = ['ops@umcmediahub.test']

LOGGING['root']['level'] = 'CRITICAL'  # noqa: F405
