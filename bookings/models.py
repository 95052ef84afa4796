from django.core.validators import MinValueValidator, RegexValidator
from django.db import models

from tables.models import Table


class Booking(models.Model):
    """
    A customer's table booking for a date and time slot.

    The table link is a weak reference: deleting a table leaves its
    bookings untouched, and `table_number`/`table_name` keep the values
    copied when the booking was made.
    """

    PENDING = 'Pending'
    CONFIRMED = 'Confirmed'
    COMPLETED = 'Completed'
    CANCELLED = 'Cancelled'

    STATUS_CHOICES = [
        (PENDING, 'Pending'),
        (CONFIRMED, 'Confirmed'),
        (COMPLETED, 'Completed'),
        (CANCELLED, 'Cancelled'),
    ]

    ACTIVE_STATUSES = [PENDING, CONFIRMED]
    TERMINAL_STATUSES = [COMPLETED, CANCELLED]

    # Allowed status changes; terminal statuses have none
    TRANSITIONS = {
        PENDING: {CONFIRMED, COMPLETED, CANCELLED},
        CONFIRMED: {COMPLETED, CANCELLED},
        COMPLETED: set(),
        CANCELLED: set(),
    }

    # Contact
    name = models.CharField(max_length=200, verbose_name='Name')
    email = models.EmailField(verbose_name='Email')
    phone = models.CharField(max_length=30, verbose_name='Phone')

    # Slot
    date = models.DateField(verbose_name='Date')
    time = models.CharField(
        max_length=5,
        validators=[RegexValidator(r'^([01]\d|2[0-3]):[0-5]\d$', 'Time must be in HH:MM format.')],
        verbose_name='Time'
    )
    guests = models.PositiveIntegerField(validators=[MinValueValidator(1)], verbose_name='Guests')

    table = models.ForeignKey(
        Table,
        on_delete=models.DO_NOTHING,
        db_constraint=False,
        null=True,
        blank=True,
        related_name='bookings',
        verbose_name='Table'
    )
    table_number = models.CharField(max_length=20, blank=True, verbose_name='Table Number')
    table_name = models.CharField(max_length=100, blank=True, verbose_name='Table Name')

    occasion = models.CharField(max_length=100, blank=True, verbose_name='Occasion')
    special_requests = models.TextField(blank=True, verbose_name='Special Requests')

    status = models.CharField(
        max_length=20,
        choices=STATUS_CHOICES,
        default=PENDING,
        verbose_name='Status'
    )

    # Pre-order
    pre_ordered_items = models.JSONField(default=list, blank=True, verbose_name='Pre-ordered Items')
    pre_order_total = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=0,
        verbose_name='Pre-order Total'
    )
    has_pre_order = models.BooleanField(default=False, editable=False, verbose_name='Has Pre-order')

    created_at = models.DateTimeField(auto_now_add=True, verbose_name='Created At')
    updated_at = models.DateTimeField(auto_now=True, verbose_name='Updated At')

    class Meta:
        verbose_name = 'Booking'
        verbose_name_plural = 'Bookings'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['table', 'date', 'time'], name='booking_table_slot_idx'),
            models.Index(fields=['status'], name='booking_status_idx'),
            models.Index(fields=['email'], name='booking_email_idx'),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=['table', 'date', 'time'],
                condition=models.Q(status__in=['Pending', 'Confirmed']),
                name='unique_active_booking_per_slot',
            ),
        ]

    def __str__(self):
        table = f" - Table {self.table_number}" if self.table_number else ''
        return f"{self.name} ({self.date} at {self.time}){table}"

    def save(self, *args, **kwargs):
        self.has_pre_order = bool(self.pre_ordered_items)
        super().save(*args, **kwargs)

    def can_transition_to(self, new_status):
        return new_status in self.TRANSITIONS.get(self.status, set())

    def can_cancel(self):
        """Customers may cancel pending or confirmed bookings only"""
        return self.status not in self.TERMINAL_STATUSES

    @property
    def hour(self):
        return int(self.time.split(':')[0])
