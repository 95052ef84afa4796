from django.core.validators import MinValueValidator
from django.db import models


class Table(models.Model):
    """A bookable restaurant table"""

    STATUS_AVAILABLE = 'available'
    STATUS_OCCUPIED = 'occupied'
    STATUS_RESERVED = 'reserved'
    STATUS_MAINTENANCE = 'maintenance'

    STATUS_CHOICES = [
        (STATUS_AVAILABLE, 'Available'),
        (STATUS_OCCUPIED, 'Occupied'),
        (STATUS_RESERVED, 'Reserved'),
        (STATUS_MAINTENANCE, 'Maintenance'),
    ]

    LOCATION_CHOICES = [
        ('indoor', 'Indoor'),
        ('outdoor', 'Outdoor'),
    ]

    table_number = models.PositiveIntegerField(unique=True, verbose_name="Table Number")
    table_name = models.CharField(max_length=100, blank=True, verbose_name="Table Name")
    capacity = models.PositiveIntegerField(
        validators=[MinValueValidator(1)],
        verbose_name="Capacity"
    )
    location = models.CharField(
        max_length=20,
        choices=LOCATION_CHOICES,
        default='indoor',
        verbose_name="Location"
    )
    features = models.JSONField(default=list, blank=True, verbose_name="Features")
    min_booking_hours = models.PositiveIntegerField(default=1, verbose_name="Minimum Booking Hours")
    price_per_hour = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=0,
        verbose_name="Price per Hour"
    )
    description = models.TextField(blank=True, verbose_name="Description")

    status = models.CharField(
        max_length=20,
        choices=STATUS_CHOICES,
        default=STATUS_AVAILABLE,
        verbose_name="Status"
    )
    is_active = models.BooleanField(default=True, verbose_name="Active")

    created_at = models.DateTimeField(auto_now_add=True, verbose_name="Created At")
    updated_at = models.DateTimeField(auto_now=True, verbose_name="Updated At")

    class Meta:
        verbose_name = "Table"
        verbose_name_plural = "Tables"
        ordering = ['table_number']

    def __str__(self):
        return f"Table {self.table_number} - {self.get_location_display()} ({self.get_status_display()})"

    def save(self, *args, **kwargs):
        if not self.table_name:
            self.table_name = f"Table {self.table_number}"
        super().save(*args, **kwargs)

    @classmethod
    def is_valid_status(cls, value):
        return value in dict(cls.STATUS_CHOICES)
