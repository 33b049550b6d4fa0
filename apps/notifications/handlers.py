"""
Event handlers for notifications

Subscribe to booking and payment events on the message bus. Handlers
run after the originating transaction commits and only enqueue Celery
tasks, so a slow mail server never delays a booking or payment request.
"""

from __future__ import annotations

import logging

from apps.bookings.domain.events import (
    BookingCompleted,
    BookingConfirmed,
    BookingCreated,
    BookingRejected,
)
from apps.bookings.models import Booking
from apps.payments.domain.events import PaymentCreated, PaymentFailed, PaymentSettled
from shared.application.message_bus import message_bus

from . import emails
from .emails import rupiah
from .models import Notification
from .services import admin_recipients, admin_user_ids
from .tasks import deliver_notification, send_email

logger = logging.getLogger(__name__)


def _load_booking(booking_id) -> Booking | None:
    booking = Booking.objects.select_related("user").filter(pk=booking_id).first()
    if booking is None:
        logger.warning(f"Booking {booking_id} vanished before its notification was sent")
    return booking


def _notify(user_id: int, type: str, title: str, body: str) -> None:
    deliver_notification.delay(user_id, type, title, body)


def _mail_user(booking: Booking, content: emails.EmailContent) -> None:
    if booking.user.email:
        send_email.delay(booking.user.email, content.subject, content.text, content.html)


def _mail_admins(content: emails.EmailContent) -> None:
    recipients = admin_recipients()
    if not recipients:
        logger.warning(f"No admin recipients for '{content.subject}'")
        return
    send_email.delay(recipients[0], content.subject, content.text, content.html, recipients[1:])


def on_booking_created(event: BookingCreated) -> None:
    booking = _load_booking(event.booking_id)
    if booking is None:
        return
    for admin_id in admin_user_ids():
        _notify(
            admin_id,
            Notification.Type.BOOKING,
            "Booking Baru",
            f"{booking.user.display_name} membuat booking {booking.dates} "
            f"senilai {rupiah(booking.total_amount)} yang menunggu konfirmasi.",
        )
    _mail_admins(emails.admin_new_booking(booking, booking.user))


def on_booking_confirmed(event: BookingConfirmed) -> None:
    booking = _load_booking(event.booking_id)
    if booking is None:
        return
    _notify(
        event.user_id,
        Notification.Type.BOOKING,
        "Booking Dikonfirmasi",
        f"Booking Anda untuk {booking.dates} telah dikonfirmasi. Silakan lakukan pembayaran.",
    )
    _mail_user(booking, emails.user_booking_status(booking, booking.user, event.notes))


def on_booking_rejected(event: BookingRejected) -> None:
    booking = _load_booking(event.booking_id)
    if booking is None:
        return
    body = f"Booking Anda untuk {booking.dates} ditolak."
    if event.reason:
        body += f" Alasan: {event.reason}"
    _notify(event.user_id, Notification.Type.BOOKING, "Booking Ditolak", body)
    _mail_user(booking, emails.user_booking_status(booking, booking.user, event.reason))


def on_booking_completed(event: BookingCompleted) -> None:
    booking = _load_booking(event.booking_id)
    if booking is None:
        return
    _notify(
        event.user_id,
        Notification.Type.BOOKING,
        "Booking Selesai",
        f"Booking Anda untuk {booking.dates} telah selesai. Terima kasih!",
    )
    _mail_user(booking, emails.user_booking_status(booking, booking.user))
    _mail_admins(emails.admin_booking_completed(booking, booking.user))


def on_payment_created(event: PaymentCreated) -> None:
    _notify(
        event.user_id,
        Notification.Type.PAYMENT,
        "Pembayaran Dibuat",
        f"Tagihan sebesar {rupiah(event.amount)} telah dibuat. Selesaikan pembayaran Anda.",
    )


def on_payment_settled(event: PaymentSettled) -> None:
    booking = _load_booking(event.booking_id)
    if booking is None:
        return
    _notify(
        event.user_id,
        Notification.Type.PAYMENT,
        "Pembayaran Berhasil",
        f"Pembayaran sebesar {rupiah(event.amount)} untuk booking {booking.dates} berhasil.",
    )
    for admin_id in admin_user_ids():
        _notify(
            admin_id,
            Notification.Type.PAYMENT,
            "Pembayaran Masuk",
            f"{booking.user.display_name} membayar {rupiah(event.amount)} untuk booking {booking.id}.",
        )
    _mail_user(booking, emails.user_payment_success(booking, booking.user))
    _mail_admins(emails.admin_payment_received(booking, booking.user))


def on_payment_failed(event: PaymentFailed) -> None:
    _notify(
        event.user_id,
        Notification.Type.PAYMENT,
        "Pembayaran Gagal",
        f"Pembayaran untuk booking {event.booking_id} gagal ({event.gateway_status}). "
        "Silakan buat pembayaran baru.",
    )


def register_handlers() -> None:
    """Subscribe the notification handlers; safe to call more than once."""
    message_bus.register_event_handler(BookingCreated, on_booking_created)
    message_bus.register_event_handler(BookingConfirmed, on_booking_confirmed)
    message_bus.register_event_handler(BookingRejected, on_booking_rejected)
    message_bus.register_event_handler(BookingCompleted, on_booking_completed)
    message_bus.register_event_handler(PaymentCreated, on_payment_created)
    message_bus.register_event_handler(PaymentSettled, on_payment_settled)
    message_bus.register_event_handler(PaymentFailed, on_payment_failed)
