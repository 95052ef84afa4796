from rest_framework import serializers

from bookings.models import Booking
from .models import Table


class TableSerializer(serializers.ModelSerializer):
    """Table as exposed by the API"""
    tableNumber = serializers.IntegerField(source='table_number', min_value=1)
    tableName = serializers.CharField(source='table_name', max_length=100, required=False, allow_blank=True)
    capacity = serializers.IntegerField(min_value=1)
    features = serializers.ListField(child=serializers.CharField(max_length=100), required=False)
    minBookingHours = serializers.IntegerField(source='min_booking_hours', min_value=1, required=False)
    pricePerHour = serializers.DecimalField(
        source='price_per_hour',
        max_digits=10,
        decimal_places=2,
        min_value=0,
        required=False,
        coerce_to_string=False
    )
    isActive = serializers.BooleanField(source='is_active', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = Table
        fields = [
            'id', 'tableNumber', 'tableName', 'capacity', 'location', 'features',
            'minBookingHours', 'pricePerHour', 'description', 'status', 'isActive',
            'createdAt', 'updatedAt'
        ]
        read_only_fields = ['id', 'status']


class TableUpdateSerializer(TableSerializer):
    """
    Partial update of a table: the writable fields of TableSerializer
    plus isActive. Status changes go through their own endpoint.
    """
    isActive = serializers.BooleanField(source='is_active', required=False)


class TodayBookingSerializer(serializers.ModelSerializer):
    """Booking summary shown on a table in the admin listing"""

    class Meta:
        model = Booking
        fields = ['id', 'time', 'guests', 'name', 'status']


class TableWithBookingsSerializer(TableSerializer):
    """Admin listing: table plus today's and upcoming bookings"""
    todayBookings = TodayBookingSerializer(source='today_bookings', many=True, read_only=True)
    upcomingBookingsCount = serializers.IntegerField(source='upcoming_bookings_count', read_only=True)
    isCurrentlyBooked = serializers.BooleanField(source='is_currently_booked', read_only=True)

    class Meta(TableSerializer.Meta):
        fields = TableSerializer.Meta.fields + [
            'todayBookings', 'upcomingBookingsCount', 'isCurrentlyBooked'
        ]


class TableStatusSerializer(serializers.Serializer):
    status = serializers.CharField(error_messages={'required': 'Status is required'})
