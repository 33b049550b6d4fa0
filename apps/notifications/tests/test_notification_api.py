"""API tests for in-app notifications."""

from __future__ import annotations

from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.notifications.models import Notification
from apps.notifications.services import notify
from apps.users.models import User


class NotificationAPITests(APITestCase):
    def setUp(self) -> None:
        self.user = User.objects.create_user(email="user@example.com", password="UserPass123")
        self.other = User.objects.create_user(email="other@example.com", password="OtherPass123")
        self.first = notify(self.user.id, Notification.Type.BOOKING, "Booking Dikonfirmasi", "...")
        self.second = notify(self.user.id, Notification.Type.PAYMENT, "Pembayaran Dibuat", "...")
        self.foreign = notify(self.other.id, Notification.Type.SYSTEM, "Halo", "...")
        self.client.force_authenticate(self.user)

    def test_lists_only_own_notifications(self) -> None:
        response = self.client.get(reverse("notification-list"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual({n["id"] for n in response.data}, {self.first.id, self.second.id})

    def test_mark_one_read(self) -> None:
        url = reverse("notification-mark-read", args=[self.first.id])

        response = self.client.post(url)

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertTrue(response.data["is_read"])
        unread = self.client.get(reverse("notification-list"), {"read": "false"}).data
        self.assertEqual([n["id"] for n in unread], [self.second.id])

        again = self.client.post(url)
        self.assertEqual(again.status_code, status.HTTP_400_BAD_REQUEST)

    def test_cannot_read_foreign_notification(self) -> None:
        response = self.client.post(reverse("notification-mark-read", args=[self.foreign.id]))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_mark_all_read(self) -> None:
        response = self.client.post(reverse("notification-mark-all-read"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["updated"], 2)
        self.assertEqual(Notification.objects.filter(user=self.user, read_at__isnull=True).count(), 0)
        self.foreign.refresh_from_db()
        self.assertIsNone(self.foreign.read_at)
