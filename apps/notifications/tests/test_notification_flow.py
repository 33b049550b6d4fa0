"""Booking and payment events turn into in-app notifications and emails."""

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal

from django.core import mail
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.bookings.models import Booking
from apps.catalog.models import Service
from apps.notifications.models import Notification
from apps.payments.application.reconciliation import WebhookReconciliationEngine
from apps.payments.gateway import TransactionStatus
from apps.payments.models import Payment
from apps.users.models import User


class SettledGateway:
    def get_transaction_status(self, order_reference):
        return TransactionStatus(transaction_status="settlement", status_code="200", raw={})


class NotificationFlowTests(APITestCase):
    def setUp(self) -> None:
        self.user = User.objects.create_user(email="user@example.com", name="Budi", password="UserPass123")
        self.admin = User.objects.create_admin(email="admin@example.com", name="Admin", password="AdminPass123")
        self.service = Service.objects.create(name="Studio", unit_rate=Decimal("150000.00"))
        self.start = date.today() + timedelta(days=3)

    def _create_booking(self) -> Booking:
        self.client.force_authenticate(self.user)
        payload = {
            "start_date": str(self.start),
            "end_date": str(self.start + timedelta(days=1)),
            "notes": "<b>Pagi</b>",
            "items": [{"service_id": str(self.service.id)}],
        }
        with self.captureOnCommitCallbacks(execute=True):
            response = self.client.post(reverse("booking-list"), payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        return Booking.objects.get(pk=response.data["id"])

    def test_new_booking_alerts_admins(self) -> None:
        self._create_booking()

        notification = Notification.objects.get(user=self.admin)
        self.assertEqual(notification.title, "Booking Baru")
        self.assertEqual(notification.type, Notification.Type.BOOKING)
        self.assertIn("Rp 300.000", notification.body)
        self.assertFalse(Notification.objects.filter(user=self.user).exists())

        self.assertEqual(len(mail.outbox), 1)
        message = mail.outbox[0]
        self.assertTrue(message.subject.startswith("Booking Baru "))
        self.assertEqual(message.to, ["admin@example.com"])
        self.assertEqual(message.bcc, ["ops@umcmediahub.test"])
        html = message.alternatives[0][0]
        self.assertIn("UMC Media Hub", html)
        self.assertIn("&lt;b&gt;Pagi&lt;/b&gt;", html)

    def test_confirmation_notifies_owner(self) -> None:
        booking = self._create_booking()
        mail.outbox.clear()

        self.client.force_authenticate(self.admin)
        with self.captureOnCommitCallbacks(execute=True):
            response = self.client.patch(
                reverse("booking-confirm", args=[booking.id]), {"notes": "Siap"}, format="json"
            )
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)

        notification = Notification.objects.get(user=self.user)
        self.assertEqual(notification.title, "Booking Dikonfirmasi")
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, ["user@example.com"])
        self.assertIn("Dikonfirmasi", mail.outbox[0].subject)
        self.assertIn("Catatan Admin: Siap", mail.outbox[0].body)

    def test_rejection_notifies_owner_with_reason(self) -> None:
        booking = self._create_booking()

        self.client.force_authenticate(self.admin)
        with self.captureOnCommitCallbacks(execute=True):
            self.client.patch(
                reverse("booking-reject", args=[booking.id]), {"reason": "Jadwal penuh"}, format="json"
            )

        notification = Notification.objects.get(user=self.user)
        self.assertEqual(notification.title, "Booking Ditolak")
        self.assertIn("Jadwal penuh", notification.body)

    def test_completion_emails_owner_and_admins(self) -> None:
        booking = self._create_booking()
        Booking.objects.filter(pk=booking.pk).update(status=Booking.Status.DIKONFIRMASI)
        mail.outbox.clear()

        self.client.force_authenticate(self.admin)
        with self.captureOnCommitCallbacks(execute=True):
            self.client.patch(reverse("booking-complete", args=[booking.id]))

        self.assertEqual(Notification.objects.get(user=self.user).title, "Booking Selesai")
        subjects = sorted(m.subject for m in mail.outbox)
        self.assertEqual(subjects, [f"Booking Selesai {booking.id}", f"Status Booking {booking.id}: Selesai"])

    def test_settled_payment_notifies_owner_and_admins(self) -> None:
        booking = self._create_booking()
        Booking.objects.filter(pk=booking.pk).update(status=Booking.Status.DIKONFIRMASI)
        payment = Payment.objects.create(
            booking=booking,
            amount=booking.total_amount,
            reference_no="bk-notify-000001",
        )
        Notification.objects.all().delete()
        mail.outbox.clear()

        with self.captureOnCommitCallbacks(execute=True):
            WebhookReconciliationEngine(SettledGateway()).reconcile(payment)

        self.assertEqual(Notification.objects.get(user=self.user).title, "Pembayaran Berhasil")
        self.assertEqual(Notification.objects.get(user=self.admin).title, "Pembayaran Masuk")
        subjects = sorted(m.subject for m in mail.outbox)
        self.assertEqual(
            subjects,
            [f"Pembayaran Berhasil untuk Booking {booking.id}", f"Pembayaran Masuk untuk Booking {booking.id}"],
        )

    def test_failed_payment_notifies_owner(self) -> None:
        booking = self._create_booking()
        Booking.objects.filter(pk=booking.pk).update(status=Booking.Status.DIKONFIRMASI)
        payment = Payment.objects.create(
            booking=booking,
            amount=booking.total_amount,
            reference_no="bk-notify-000002",
        )

        class ExpiredGateway:
            def get_transaction_status(self, order_reference):
                return TransactionStatus(transaction_status="expire", status_code="407", raw={})

        with self.captureOnCommitCallbacks(execute=True):
            WebhookReconciliationEngine(ExpiredGateway()).reconcile(payment)

        self.assertEqual(Notification.objects.get(user=self.user).title, "Pembayaran Gagal")

    def test_nothing_is_sent_when_transaction_rolls_back(self) -> None:
        self.client.force_authenticate(self.user)
        payload = {
            "start_date": str(self.start),
            "end_date": str(self.start),
            "items": [{"service_id": "00000000-0000-0000-0000-000000000000"}],
        }
        with self.captureOnCommitCallbacks(execute=True):
            response = self.client.post(reverse("booking-list"), payload, format="json")

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(Notification.objects.count(), 0)
        self.assertEqual(len(mail.outbox), 0)
