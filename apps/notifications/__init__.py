"""Notifications app package.

In-app notifications and email delivery. Booking and payment events are
turned into Celery tasks by the handlers registered in ``apps.py``.
"""
