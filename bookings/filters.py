import django_filters

from .models import Booking


class BookingFilter(django_filters.FilterSet):
    """Admin list filters. `table` matches the stored id, even for deleted tables."""
    table = django_filters.NumberFilter(field_name='table_id')

    class Meta:
        model = Booking
        fields = ['status', 'date', 'table']
