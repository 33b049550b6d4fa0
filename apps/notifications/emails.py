"""Email templates for booking and payment events.

Each builder returns an ``EmailContent`` with subject, plain text and
HTML bodies. Amounts are rendered as Rupiah with dot thousands separators.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING

from django.conf import settings  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.html import escape  # type: ignore

from apps.bookings.domain.state_machine import BookingStatus

if TYPE_CHECKING:  # pragma: no cover
    from apps.bookings.models import Booking
    from apps.users.models import CustomUser

BRAND = "UMC Media Hub"

STATUS_TITLES = {
    BookingStatus.DIKONFIRMASI: "Dikonfirmasi",
    BookingStatus.DITOLAK: "Ditolak",
    BookingStatus.SELESAI: "Selesai",
}


@dataclass(frozen=True)
class EmailContent:
    subject: str
    text: str
    html: str


def rupiah(amount: Decimal | int | None) -> str:
    """``Rp 1.500.000``"""
    value = int(Decimal(amount or 0))
    return "Rp " + f"{value:,}".replace(",", ".")


def _dashboard_url() -> str:
    return f"{settings.BASE_APP_URL}/auth/login"


def _rows(rows: list[tuple[str, str]]) -> str:
    return "".join(
        f"""
                <tr>
                  <td style="background:#f8fafc;padding:10px 14px;font-weight:600;width:30%">{label}</td>
                  <td style="padding:10px 14px">{escape(value)}</td>
                </tr>"""
        for label, value in rows
    )


def _layout(tagline: str, heading: str, intro: str, rows: list[tuple[str, str]], extra: str = "") -> str:
    url = _dashboard_url()
    return f"""
    <html>
    <body style="background:#f6f7fb;padding:24px 0;font-family:Inter,Arial,sans-serif;color:#0f172a">
      <div style="max-width:640px;margin:0 auto;background:#ffffff;border-radius:16px;overflow:hidden">
        <div style="background:#4f46e5;padding:20px 24px;color:#fff">
          <h1 style="margin:0;font-size:20px">{BRAND}</h1>
          <p style="margin:4px 0 0 0;font-size:13px">{tagline}</p>
        </div>
        <div style="padding:24px">
          <h2 style="margin:0 0 12px 0;font-size:18px">{heading}</h2>
          <p style="margin:0 0 16px 0;font-size:14px;color:#334155">{intro}</p>
          <table role="presentation" width="100%" cellpadding="0" cellspacing="0" style="border:1px solid #e5e7eb">
            {_rows(rows)}
          </table>
          {extra}
          <p style="margin-top:20px">
            <a href="{url}" style="background:#4f46e5;color:#fff;text-decoration:none;padding:10px 16px;border-radius:10px">Buka Dashboard</a>
          </p>
        </div>
        <div style="background:#0f172a;color:#cbd5e1;padding:16px 24px;font-size:12px">
          &copy; {timezone.now().year} {BRAND}. Semua hak dilindungi.
        </div>
      </div>
    </body>
    </html>
    """


def _booking_rows(booking: "Booking", user: "CustomUser") -> list[tuple[str, str]]:
    return [
        ("ID Booking", str(booking.id)),
        ("Pemesan", f"{user.name or '-'} <{user.email or '-'}>"),
        ("Tanggal", str(booking.dates)),
        ("Total", rupiah(booking.total_amount)),
    ]


def _text(lines: list[str]) -> str:
    return "\n".join(line for line in lines if line is not None)


def admin_new_booking(booking: "Booking", user: "CustomUser") -> EmailContent:
    rows = _booking_rows(booking, user)
    if booking.notes:
        rows.append(("Catatan", booking.notes))
    text = _text([
        "Ada booking baru yang menunggu konfirmasi:",
        *(f"{label}: {value}" for label, value in rows),
        "",
        f"Buka dashboard admin: {_dashboard_url()}",
    ])
    html = _layout(
        "Notifikasi Booking Baru",
        "Booking Menunggu Konfirmasi",
        "Ada booking baru yang perlu ditinjau oleh admin.",
        rows,
    )
    return EmailContent(f"Booking Baru {booking.id} - Menunggu Konfirmasi", text, html)


def user_booking_status(booking: "Booking", user: "CustomUser", reason: str | None = None) -> EmailContent:
    title = STATUS_TITLES.get(booking.status, str(booking.status))
    rows = [
        ("ID Booking", str(booking.id)),
        ("Status", title),
        ("Tanggal", str(booking.dates)),
        ("Total", rupiah(booking.total_amount)),
    ]
    if reason:
        rows.append(("Catatan Admin", reason))

    feedback_url = f"{settings.BASE_APP_URL}/feedback/{booking.id}"
    completed = booking.status == BookingStatus.SELESAI
    lines = [
        f"Halo {user.name or 'Pengguna'},",
        f"Status booking Anda telah diperbarui: {title}.",
        *(f"{label}: {value}" for label, value in rows),
    ]
    if completed:
        lines += ["", "Kami sangat menghargai masukan Anda.", f"Beri feedback: {feedback_url}"]
    lines += ["", f"Lihat detail di dashboard: {_dashboard_url()}"]

    extra = ""
    if completed:
        extra = (
            '<p style="margin-top:16px;font-size:14px"><strong>Bagikan pengalaman Anda!</strong> '
            f'<a href="{feedback_url}">Beri Feedback</a></p>'
        )
    html = _layout(
        "Status Booking Anda",
        f"Booking {title}",
        f"Halo {escape(user.name or 'Pengguna')}, status booking Anda telah diperbarui.",
        rows,
        extra,
    )
    return EmailContent(f"Status Booking {booking.id}: {title}", _text(lines), html)


def user_payment_success(booking: "Booking", user: "CustomUser") -> EmailContent:
    rows = [
        ("ID Booking", str(booking.id)),
        ("Tanggal", str(booking.dates)),
        ("Total Dibayar", rupiah(booking.total_amount)),
    ]
    text = _text([
        f"Halo {user.name or 'Pengguna'},",
        "Pembayaran Anda telah berhasil diterima.",
        *(f"{label}: {value}" for label, value in rows),
        "",
        f"Lihat detail di dashboard: {_dashboard_url()}",
    ])
    html = _layout(
        "Konfirmasi Pembayaran",
        "Pembayaran Berhasil",
        f"Halo {escape(user.name or 'Pengguna')}, terima kasih. Pembayaran Anda telah kami terima.",
        rows,
    )
    return EmailContent(f"Pembayaran Berhasil untuk Booking {booking.id}", text, html)


def admin_payment_received(booking: "Booking", user: "CustomUser") -> EmailContent:
    rows = _booking_rows(booking, user)
    text = _text([
        "Pembayaran baru telah diterima:",
        *(f"{label}: {value}" for label, value in rows),
        "",
        f"Buka dashboard admin: {_dashboard_url()}",
    ])
    html = _layout(
        "Notifikasi Pembayaran",
        "Pembayaran Masuk",
        "Pembayaran untuk booking berikut telah diterima.",
        rows,
    )
    return EmailContent(f"Pembayaran Masuk untuk Booking {booking.id}", text, html)


def admin_booking_completed(booking: "Booking", user: "CustomUser") -> EmailContent:
    rows = _booking_rows(booking, user)
    text = _text([
        "Booking berikut telah ditandai selesai:",
        *(f"{label}: {value}" for label, value in rows),
        "",
        f"Buka dashboard admin: {_dashboard_url()}",
    ])
    html = _layout(
        "Notifikasi Booking",
        "Booking Selesai",
        "Booking berikut telah ditandai selesai.",
        rows,
    )
    return EmailContent(f"Booking Selesai {booking.id}", text, html)
