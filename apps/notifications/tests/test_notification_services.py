from smtplib import SMTPException
from unittest import mock

import pytest
from django.core import mail

from apps.notifications import services
from apps.notifications.tasks import send_email
from apps.users.models import User


@pytest.mark.django_db
def test_admin_recipients_merge_and_deduplicate(settings):
    settings.ADMIN_EMAILS = ["OPS@example.com", "admin@example.com"]
    User.objects.create_admin(email="admin@example.com", password="x" * 10)
    User.objects.create_admin(email="ops@example.com", password="x" * 10)
    User.objects.create_user(email="user@example.com", password="x" * 10)

    recipients = services.admin_recipients()

    assert sorted(r.lower() for r in recipients) == ["admin@example.com", "ops@example.com"]


def test_send_mail_with_html_alternative():
    sent = services.send_mail("a@example.com", "Hi", html="<p>Hello</p>", bcc=["b@example.com"])

    assert sent == 1
    message = mail.outbox[0]
    assert message.body == "Hello"
    assert message.bcc == ["b@example.com"]
    assert message.alternatives[0][1] == "text/html"


def test_send_mail_without_recipients_is_skipped():
    assert services.send_mail([], "Nobody", text="x") == 0
    assert mail.outbox == []


def test_email_task_swallows_delivery_failures():
    with mock.patch.object(services, "send_mail", side_effect=SMTPException("down")):
        assert send_email("a@example.com", "Hi", text="x") == 0
