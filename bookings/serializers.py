from django.core.validators import RegexValidator
from rest_framework import serializers

from .models import Booking

REQUIRED_MESSAGE = 'Please fill all required fields'

required_errors = {
    'required': REQUIRED_MESSAGE,
    'blank': REQUIRED_MESSAGE,
    'null': REQUIRED_MESSAGE,
}

time_validator = RegexValidator(r'^([01]\d|2[0-3]):[0-5]\d$', 'Time must be in HH:MM format.')


class BookingSerializer(serializers.ModelSerializer):
    """Booking as exposed by the API"""
    tableId = serializers.IntegerField(source='table_id', read_only=True)
    tableNumber = serializers.CharField(source='table_number', read_only=True)
    tableName = serializers.CharField(source='table_name', read_only=True)
    specialRequests = serializers.CharField(source='special_requests', read_only=True)
    preOrderedItems = serializers.JSONField(source='pre_ordered_items', read_only=True)
    preOrderTotal = serializers.DecimalField(
        source='pre_order_total',
        max_digits=10,
        decimal_places=2,
        read_only=True,
        coerce_to_string=False
    )
    hasPreOrder = serializers.BooleanField(source='has_pre_order', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = Booking
        fields = [
            'id', 'name', 'email', 'phone', 'date', 'time', 'guests',
            'tableId', 'tableNumber', 'tableName', 'occasion', 'specialRequests',
            'status', 'preOrderedItems', 'preOrderTotal', 'hasPreOrder',
            'createdAt', 'updatedAt'
        ]
        read_only_fields = fields


class BookingCreateSerializer(serializers.Serializer):
    """Input of a new booking"""
    name = serializers.CharField(max_length=200, error_messages=required_errors)
    email = serializers.EmailField(error_messages=required_errors)
    phone = serializers.CharField(max_length=30, error_messages=required_errors)
    date = serializers.DateField(error_messages=required_errors)
    time = serializers.CharField(max_length=5, validators=[time_validator], error_messages=required_errors)
    guests = serializers.IntegerField(
        min_value=1,
        error_messages={**required_errors, 'min_value': REQUIRED_MESSAGE}
    )
    tableId = serializers.IntegerField(source='table_id', min_value=1, required=False, allow_null=True)
    tableNumber = serializers.CharField(source='table_number', max_length=20, required=False, allow_blank=True)
    tableName = serializers.CharField(source='table_name', max_length=100, required=False, allow_blank=True)
    occasion = serializers.CharField(max_length=100, required=False, allow_blank=True)
    specialRequests = serializers.CharField(source='special_requests', required=False, allow_blank=True)
    preOrderedItems = serializers.ListField(
        source='pre_ordered_items',
        child=serializers.JSONField(),
        required=False
    )
    preOrderTotal = serializers.DecimalField(
        source='pre_order_total',
        max_digits=10,
        decimal_places=2,
        min_value=0,
        required=False
    )


class BookingStatusSerializer(serializers.Serializer):
    status = serializers.CharField(error_messages={'required': 'Booking ID and status are required'})


class UserBookingsSerializer(serializers.Serializer):
    """Lookup by email, phone or both"""
    email = serializers.CharField(required=False, allow_blank=True)
    phone = serializers.CharField(required=False, allow_blank=True)


class CancelBookingSerializer(serializers.Serializer):
    email = serializers.EmailField(error_messages={'required': 'Booking ID and email are required'})
