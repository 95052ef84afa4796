"""
Booking rules: slot availability and the booking lifecycle, including the
table status changes each booking change triggers.
"""
import logging
from datetime import datetime

from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import Q
from django.utils import timezone

from tablebook.exceptions import (
    AuthorizationError,
    ConflictError,
    InvalidEnumError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from tables.models import Table
from tables.services import TableAdminHelper
from .models import Booking

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ('name', 'email', 'phone', 'date', 'time', 'guests')

BOOKING_FIELDS = REQUIRED_FIELDS + (
    'table_id', 'table_number', 'table_name', 'occasion', 'special_requests',
    'pre_ordered_items', 'pre_order_total',
)

SLOT_TAKEN_MESSAGE = 'This table is already booked for the selected date and time'


def parse_date(value, field='date'):
    """Parses a YYYY-MM-DD query value"""
    try:
        return datetime.strptime(value, '%Y-%m-%d').date()
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid {field}. Use YYYY-MM-DD.")


class AvailabilityHelper:
    """Decides whether tables are free for a slot"""

    @staticmethod
    def active_bookings(table_id, date, exclude_booking_id=None):
        """Pending or confirmed bookings of a table on a calendar date"""
        queryset = Booking.objects.filter(
            table_id=table_id,
            date=date,
            status__in=Booking.ACTIVE_STATUSES
        )
        if exclude_booking_id is not None:
            queryset = queryset.exclude(pk=exclude_booking_id)
        return queryset

    @staticmethod
    def is_table_free(table_id, date, time, exclude_booking_id=None):
        """
        A table is taken when an active booking holds the exact same time
        string on that date. Booking durations are not considered, so
        18:00 does not conflict with 18:30.
        """
        return not AvailabilityHelper.active_bookings(
            table_id, date, exclude_booking_id
        ).filter(time=time).exists()

    @staticmethod
    def list_available_tables(date=None, time=None, min_guests=None):
        """Active tables not under maintenance, smallest first"""
        tables = Table.objects.filter(is_active=True).exclude(status=Table.STATUS_MAINTENANCE)

        if min_guests is not None:
            tables = tables.filter(capacity__gte=min_guests)

        if date and time:
            booked_ids = Booking.objects.filter(
                table_id__isnull=False,
                date=date,
                time=time,
                status__in=Booking.ACTIVE_STATUSES
            ).values_list('table_id', flat=True)
            tables = tables.exclude(id__in=booked_ids)

        return tables.order_by('capacity', 'table_number')


class BookingLifecycle:
    """Creates bookings and moves them through their statuses"""

    @staticmethod
    def get(booking_id):
        try:
            return Booking.objects.get(pk=booking_id)
        except Booking.DoesNotExist:
            raise NotFoundError('Booking not found')

    @staticmethod
    def create(**fields):
        """
        Creates a pending booking. A booking for a table reserves it, even
        when that table already carries another booking for a different
        time that day.
        """
        if any(fields.get(name) in (None, '') for name in REQUIRED_FIELDS) or int(fields['guests']) < 1:
            raise ValidationError('Please fill all required fields')

        data = {
            name: fields[name] for name in BOOKING_FIELDS
            if fields.get(name) is not None
        }
        table_id = data.get('table_id')

        with transaction.atomic():
            if table_id and not AvailabilityHelper.is_table_free(table_id, data['date'], data['time']):
                raise ConflictError(SLOT_TAKEN_MESSAGE)

            # Snapshot the table as it is now; never refreshed afterwards
            table = Table.objects.filter(pk=table_id).first() if table_id else None
            if table is not None:
                if not data.get('table_number'):
                    data['table_number'] = str(table.table_number)
                if not data.get('table_name'):
                    data['table_name'] = table.table_name

            try:
                with transaction.atomic():
                    booking = Booking.objects.create(status=Booking.PENDING, **data)
            except IntegrityError:
                # Lost the race for the slot to a concurrent booking
                if table_id and AvailabilityHelper.active_bookings(
                    table_id, data['date']
                ).filter(time=data['time']).exists():
                    raise ConflictError(SLOT_TAKEN_MESSAGE)
                raise

            if table_id:
                TableAdminHelper.sync_status(table_id, Table.STATUS_RESERVED)

        logger.info(
            "New booking created: %s%s%s",
            booking.pk,
            f" Table: {booking.table_number}" if booking.table_number else '',
            f" with {len(booking.pre_ordered_items)} pre-ordered items" if booking.has_pre_order else '',
        )
        return booking

    @staticmethod
    def release_table(booking, exclude_booking_id=None):
        """
        Marks the booking's table available again when no other active
        booking holds it in the release window. The window is today by
        default, or the booking's own date with
        BOOKINGS['RELEASE_WINDOW'] = 'booking_date'.
        """
        if not booking.table_id:
            return False

        window = getattr(settings, 'BOOKINGS', {}).get('RELEASE_WINDOW', 'today')
        day = booking.date if window == 'booking_date' else timezone.localdate()

        if AvailabilityHelper.active_bookings(booking.table_id, day, exclude_booking_id).exists():
            return False

        TableAdminHelper.sync_status(booking.table_id, Table.STATUS_AVAILABLE)
        logger.info("Table %s released and marked as available", booking.table_number or booking.table_id)
        return True

    @staticmethod
    def set_status(booking_id, new_status):
        """Admin status change with its table side effect"""
        if new_status not in dict(Booking.STATUS_CHOICES):
            raise InvalidEnumError('Invalid status')

        with transaction.atomic():
            booking = BookingLifecycle.get(booking_id)

            if not booking.can_transition_to(new_status):
                raise InvalidStateError(
                    f"Cannot change a {booking.status.lower()} booking to {new_status.lower()}"
                )

            booking.status = new_status
            booking.save(update_fields=['status', 'updated_at'])

            if booking.table_id:
                if new_status in Booking.TERMINAL_STATUSES:
                    BookingLifecycle.release_table(booking, exclude_booking_id=booking.pk)
                elif new_status == Booking.CONFIRMED:
                    TableAdminHelper.sync_status(booking.table_id, Table.STATUS_RESERVED)

        logger.info("Booking status updated: %s -> %s", booking.pk, new_status)
        return booking

    @staticmethod
    def cancel_by_user(booking_id, email):
        """Self-service cancellation; the email must match the booking"""
        with transaction.atomic():
            booking = Booking.objects.filter(pk=booking_id, email=email).first()
            if booking is None:
                raise AuthorizationError('Booking not found or unauthorized')

            if not booking.can_cancel():
                raise InvalidStateError(f"Cannot cancel a {booking.status.lower()} booking")

            booking.status = Booking.CANCELLED
            booking.save(update_fields=['status', 'updated_at'])
            BookingLifecycle.release_table(booking, exclude_booking_id=booking.pk)

        logger.info("Booking cancelled by user: %s", booking.pk)
        return booking

    @staticmethod
    def delete(booking_id):
        """Admin delete, allowed in any status"""
        with transaction.atomic():
            booking = BookingLifecycle.get(booking_id)
            booking_pk = booking.pk
            booking.delete()
            BookingLifecycle.release_table(booking, exclude_booking_id=booking_pk)

        logger.info("Booking deleted: %s", booking_pk)

    @staticmethod
    def for_date(date):
        """Non-cancelled bookings on a date"""
        return Booking.objects.filter(date=date).exclude(status=Booking.CANCELLED)

    @staticmethod
    def for_user(email=None, phone=None):
        """Bookings matching the email or the phone, newest first"""
        if not email and not phone:
            raise ValidationError('Email or phone is required')

        query = Q()
        if email:
            query |= Q(email=email)
        if phone:
            query |= Q(phone=phone)
        return Booking.objects.filter(query).order_by('-created_at')
