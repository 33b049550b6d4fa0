"""
Booking Command Handlers

These are the use cases for the booking domain.
They orchestrate domain operations within transactions.

Commands:
- CreateBookingCommand: Owner creates a booking (-> MENUNGGU)
- UpdateBookingCommand: Owner edits dates/notes while MENUNGGU
- CancelBookingCommand: Owner cancels (-> DIBATALKAN)
- ConfirmBookingCommand: Admin approves (-> DIKONFIRMASI)
- RejectBookingCommand: Admin rejects (-> DITOLAK)
- CompleteBookingCommand: Admin completes (-> SELESAI)

Every status change goes through Booking.transition_to(), which enforces
the allow-list before anything is written.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional
from uuid import UUID
import logging

from shared.application.uow import DjangoUnitOfWork
from shared.domain.exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationError
from shared.domain.value_objects import DateRange
from apps.bookings.domain import pricing
from apps.bookings.domain.events import (
    BookingCancelled,
    BookingCompleted,
    BookingConfirmed,
    BookingCreated,
    BookingRejected,
)
from apps.bookings.domain.state_machine import BookingStatus, assert_completable, is_editable
from apps.bookings.models import Booking, BookingItem

logger = logging.getLogger(__name__)

UNSET = object()


# ===== Commands =====

@dataclass
class BookingItemInput:
    service_id: Optional[UUID]
    package_id: Optional[UUID] = None
    quantity: int = 1
    notes: str = ''


@dataclass
class CreateBookingCommand:
    """Command to create a new booking in MENUNGGU"""
    user_id: int
    start_date: Optional[date]
    end_date: Optional[date]
    items: List[BookingItemInput] = field(default_factory=list)
    notes: str = ''


@dataclass
class UpdateBookingCommand:
    """Owner edit; omitted dates keep their current value"""
    booking_id: UUID
    owner_id: int
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    notes: object = UNSET


@dataclass
class CancelBookingCommand:
    booking_id: UUID
    owner_id: int


@dataclass
class ConfirmBookingCommand:
    booking_id: UUID
    admin_id: int
    notes: Optional[str] = None


@dataclass
class RejectBookingCommand:
    booking_id: UUID
    admin_id: int
    reason: Optional[str] = None


@dataclass
class CompleteBookingCommand:
    booking_id: UUID
    admin_id: int


def _date_range(start_date, end_date) -> DateRange:
    if not start_date or not end_date:
        raise ValidationError("Start date and end date are required")
    try:
        return DateRange(start_date, end_date)
    except ValueError as e:
        raise ValidationError(str(e)) from e


def _load_for_update(booking_id: UUID, owner_id: Optional[int] = None) -> Booking:
    """Row-locked load; owner-scoped lookups treat foreign bookings as missing"""
    qs = Booking.objects.select_for_update()
    if owner_id is not None:
        qs = qs.filter(user_id=owner_id)
    try:
        return qs.get(pk=booking_id)
    except Booking.DoesNotExist:
        raise NotFoundError(f"Booking {booking_id} not found")


def _require_admin(admin_id: int) -> None:
    """Approval decisions belong to active admins only"""
    from apps.users.models import User

    admin = User.objects.filter(pk=admin_id, is_active=True).first()
    if admin is None or not (admin.is_superuser or admin.is_admin()):
        raise ForbiddenError("Only admins can confirm, reject or complete bookings")


# ===== Command Handlers =====

class CreateBookingHandler:
    """
    Handler for CreateBooking command

    1. Validate dates and items
    2. Resolve each item's frozen unit rate from the catalog
    3. Price all lines with the pricing engine
    4. Persist booking and items atomically
    5. Publish BookingCreated after commit
    """

    def handle(self, command: CreateBookingCommand) -> Booking:
        from apps.catalog.models import Package, Service

        dates = _date_range(command.start_date, command.end_date)
        if not command.items:
            raise ValidationError("At least one service item is required")

        days = pricing.duration_days(dates)
        logger.info(
            f"Creating booking for user {command.user_id}, "
            f"dates {dates} ({days} days), {len(command.items)} item(s)"
        )

        lines = []
        for item in command.items:
            if not item.service_id:
                raise ValidationError("Each item needs a service_id")
            if item.quantity is None or item.quantity < 1:
                raise ValidationError("Item quantity must be a positive integer")

            service = Service.objects.filter(pk=item.service_id).first()
            if service is None:
                raise NotFoundError(f"Service {item.service_id} not found")
            if not service.is_active:
                raise ConflictError(f"Service {service.name} is not active")

            package_rate = None
            if item.package_id:
                package = Package.objects.filter(pk=item.package_id).first()
                if package is None:
                    raise NotFoundError(f"Package {item.package_id} not found")
                if package.service_id != service.pk:
                    raise ConflictError(
                        f"Package {package.pk} does not belong to service {service.pk}"
                    )
                package_rate = package.unit_rate

            lines.append(pricing.PriceLine(
                unit_rate=pricing.resolve_unit_rate(service.unit_rate, package_rate),
                quantity=item.quantity,
            ))

        result = pricing.compute_total(lines, days)

        with DjangoUnitOfWork() as uow:
            booking = Booking.objects.create(
                user_id=command.user_id,
                start_date=dates.start_date,
                end_date=dates.end_date,
                total_amount=result.total.amount,
                status=BookingStatus.MENUNGGU,
                notes=command.notes or '',
            )
            BookingItem.objects.bulk_create([
                BookingItem(
                    booking=booking,
                    service_id=item.service_id,
                    package_id=item.package_id or None,
                    quantity=item.quantity,
                    unit_price=line.unit_rate,
                    subtotal=subtotal.amount,
                    notes=item.notes or '',
                )
                for item, line, subtotal in zip(command.items, lines, result.subtotals)
            ])

            booking.add_event(BookingCreated(
                aggregate_id=booking.id,
                booking_id=booking.id,
                user_id=command.user_id,
                total_amount=booking.total_amount,
            ))
            uow.collect_events(booking)

        logger.info(f"Booking {booking.id} created with total {result.total}")
        return booking


class UpdateBookingHandler:
    """Owner edits a booking that is still waiting for approval"""

    def handle(self, command: UpdateBookingCommand) -> Booking:
        with DjangoUnitOfWork():
            booking = _load_for_update(command.booking_id, owner_id=command.owner_id)

            if not is_editable(booking.status):
                raise ConflictError(
                    f"Only bookings in {BookingStatus.MENUNGGU} can be updated "
                    f"(current: {booking.status})"
                )

            if command.start_date or command.end_date:
                dates = _date_range(
                    command.start_date or booking.start_date,
                    command.end_date or booking.end_date,
                )
                booking.start_date = dates.start_date
                booking.end_date = dates.end_date
                self._reprice(booking, pricing.duration_days(dates))

            if command.notes is not UNSET:
                booking.notes = command.notes or ''

            booking.save()

        logger.info(f"Booking {booking.id} updated by owner {command.owner_id}")
        return booking

    def _reprice(self, booking: Booking, days: int):
        """Recompute every subtotal from the frozen unit prices"""
        items = list(booking.items.all())
        result = pricing.compute_total(
            [pricing.PriceLine(unit_rate=item.unit_price, quantity=item.quantity) for item in items],
            days,
        )
        for item, subtotal in zip(items, result.subtotals):
            item.subtotal = subtotal.amount
        BookingItem.objects.bulk_update(items, ["subtotal"])
        booking.total_amount = result.total.amount


class CancelBookingHandler:
    """Owner cancels a booking that is waiting or confirmed"""

    def handle(self, command: CancelBookingCommand) -> Booking:
        with DjangoUnitOfWork() as uow:
            booking = _load_for_update(command.booking_id, owner_id=command.owner_id)
            previous = booking.transition_to(BookingStatus.DIBATALKAN)
            booking.save(update_fields=["status", "updated_at"])

            booking.add_event(BookingCancelled(
                aggregate_id=booking.id,
                booking_id=booking.id,
                user_id=booking.user_id,
                previous_status=previous,
            ))
            uow.collect_events(booking)

        logger.info(f"Booking {booking.id} cancelled by owner ({previous} -> {booking.status})")
        return booking


class ConfirmBookingHandler:
    """Admin approves a waiting booking"""

    def handle(self, command: ConfirmBookingCommand) -> Booking:
        _require_admin(command.admin_id)
        with DjangoUnitOfWork() as uow:
            booking = _load_for_update(command.booking_id)
            booking.transition_to(BookingStatus.DIKONFIRMASI)
            booking.approver_id = command.admin_id
            if command.notes:
                booking.append_note(f"Admin notes: {command.notes}")
            booking.save(update_fields=["status", "approver", "notes", "updated_at"])

            booking.add_event(BookingConfirmed(
                aggregate_id=booking.id,
                booking_id=booking.id,
                user_id=booking.user_id,
                approver_id=command.admin_id,
                notes=command.notes,
            ))
            uow.collect_events(booking)

        logger.info(f"Booking {booking.id} confirmed by admin {command.admin_id}")
        return booking


class RejectBookingHandler:
    """Admin rejects a waiting booking"""

    def handle(self, command: RejectBookingCommand) -> Booking:
        _require_admin(command.admin_id)
        with DjangoUnitOfWork() as uow:
            booking = _load_for_update(command.booking_id)
            booking.transition_to(BookingStatus.DITOLAK)
            booking.approver_id = command.admin_id
            if command.reason:
                booking.append_note(f"Alasan ditolak: {command.reason}")
            booking.save(update_fields=["status", "approver", "notes", "updated_at"])

            booking.add_event(BookingRejected(
                aggregate_id=booking.id,
                booking_id=booking.id,
                user_id=booking.user_id,
                approver_id=command.admin_id,
                reason=command.reason,
            ))
            uow.collect_events(booking)

        logger.info(f"Booking {booking.id} rejected by admin {command.admin_id}")
        return booking


class CompleteBookingHandler:
    """
    Admin completes a confirmed booking

    Completing a booking that never received a PAID payment is allowed
    (offline settlement) but logged as a warning.
    """

    def handle(self, command: CompleteBookingCommand) -> Booking:
        from apps.payments.models import Payment

        _require_admin(command.admin_id)
        with DjangoUnitOfWork() as uow:
            booking = _load_for_update(command.booking_id)
            assert_completable(booking.status)
            previous = booking.transition_to(BookingStatus.SELESAI)
            booking.approver_id = command.admin_id
            booking.save(update_fields=["status", "approver", "updated_at"])

            was_paid = booking.payments.filter(status=Payment.Status.PAID).exists()
            if not was_paid:
                logger.warning(
                    f"Booking {booking.id} completed from {previous} without a PAID payment"
                )

            booking.add_event(BookingCompleted(
                aggregate_id=booking.id,
                booking_id=booking.id,
                user_id=booking.user_id,
                approver_id=command.admin_id,
                was_paid=was_paid,
            ))
            uow.collect_events(booking)

        logger.info(f"Booking {booking.id} completed by admin {command.admin_id}")
        return booking
