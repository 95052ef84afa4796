"""
Table administration: create, update, status changes and the admin
listing annotated with each table's bookings.
"""
import logging
from datetime import timedelta

from django.conf import settings
from django.utils import timezone

from tablebook.exceptions import ConflictError, InvalidEnumError, NotFoundError
from .models import Table

logger = logging.getLogger(__name__)


def booking_setting(name, default):
    return getattr(settings, 'BOOKINGS', {}).get(name, default)


class TableAdminHelper:
    """Helper for table administration"""

    @staticmethod
    def get(table_id):
        try:
            return Table.objects.get(pk=table_id)
        except Table.DoesNotExist:
            raise NotFoundError('Table not found')

    @staticmethod
    def add(validated_data):
        """Creates a table; table numbers are unique"""
        table_number = validated_data.get('table_number')
        if Table.objects.filter(table_number=table_number).exists():
            raise ConflictError('Table number already exists')

        table = Table.objects.create(**validated_data)
        logger.info("New table added: %s", table.table_number)
        return table

    @staticmethod
    def update(table, validated_data):
        """Applies an already validated partial update"""
        table_number = validated_data.get('table_number')
        if table_number is not None and table_number != table.table_number:
            if Table.objects.filter(table_number=table_number).exclude(pk=table.pk).exists():
                raise ConflictError('Table number already exists')

        for attr, value in validated_data.items():
            setattr(table, attr, value)
        table.save()
        logger.info("Table %s updated", table.table_number)
        return table

    @staticmethod
    def update_status(table_id, status):
        if not Table.is_valid_status(status):
            raise InvalidEnumError('Invalid status')

        table = TableAdminHelper.get(table_id)
        table.status = status
        table.save(update_fields=['status', 'updated_at'])
        logger.info("Table %s status updated to: %s", table.table_number, status)
        return table

    @staticmethod
    def toggle_active(table_id):
        table = TableAdminHelper.get(table_id)
        table.is_active = not table.is_active
        table.save(update_fields=['is_active', 'updated_at'])
        logger.info("Table %s %s", table.table_number, 'activated' if table.is_active else 'deactivated')
        return table

    @staticmethod
    def delete(table_id):
        """Bookings keep pointing at the deleted table's id"""
        table = TableAdminHelper.get(table_id)
        table_number = table.table_number
        table.delete()
        logger.info("Table deleted: %s", table_number)
        return table_number

    @staticmethod
    def sync_status(table_id, status):
        """
        Status change triggered by a booking. Unknown ids (deleted tables)
        are ignored.
        """
        updated = Table.objects.filter(pk=table_id).update(status=status, updated_at=timezone.now())
        if updated:
            logger.info("Table %s marked as %s", table_id, status)
        return bool(updated)

    @staticmethod
    def list_with_bookings(tables=None, now=None):
        """
        Tables (all by default) ordered by number, each annotated with:
        - today_bookings: today's active bookings
        - upcoming_bookings_count: active bookings over the next days
        - is_currently_booked: a booking today starts within a couple of
          hours of the current hour (approximate)
        """
        from bookings.models import Booking

        now = timezone.localtime(now) if now else timezone.localtime()
        today = now.date()
        upcoming_days = booking_setting('UPCOMING_DAYS', 7)
        window_hours = booking_setting('CURRENTLY_BOOKED_HOURS', 2)

        active = Booking.objects.filter(
            table_id__isnull=False,
            status__in=Booking.ACTIVE_STATUSES
        )

        today_by_table = {}
        for booking in active.filter(date=today).order_by('time'):
            today_by_table.setdefault(booking.table_id, []).append(booking)

        upcoming_by_table = {}
        upcoming = active.filter(
            date__gt=today,
            date__lte=today + timedelta(days=upcoming_days)
        ).values_list('table_id', flat=True)
        for table_id in upcoming:
            upcoming_by_table[table_id] = upcoming_by_table.get(table_id, 0) + 1

        if tables is None:
            tables = Table.objects.all()
        tables = list(tables.order_by('table_number'))
        for table in tables:
            table.today_bookings = today_by_table.get(table.pk, [])
            table.upcoming_bookings_count = upcoming_by_table.get(table.pk, 0)
            table.is_currently_booked = any(
                abs(now.hour - booking.hour) <= window_hours
                for booking in table.today_bookings
            )
        return tables
