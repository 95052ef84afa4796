from django.contrib import admin
from .models import Booking


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    """Admin for the Booking model"""

    list_display = [
        'id',
        'name',
        'date',
        'time',
        'guests',
        'table_number',
        'status',
        'has_pre_order',
        'created_at'
    ]

    list_filter = [
        'status',
        'date',
        'has_pre_order',
        'created_at'
    ]

    search_fields = [
        'name',
        'email',
        'phone',
        'table_number'
    ]

    readonly_fields = [
        'table_number',
        'table_name',
        'has_pre_order',
        'created_at',
        'updated_at'
    ]

    fieldsets = (
        ('Booking', {
            'fields': (
                'date',
                'time',
                'guests',
                'table',
                'table_number',
                'table_name',
                'status'
            )
        }),
        ('Customer', {
            'fields': (
                'name',
                'email',
                'phone',
                'occasion',
                'special_requests'
            )
        }),
        ('Pre-order', {
            'fields': (
                'pre_ordered_items',
                'pre_order_total',
                'has_pre_order'
            )
        }),
        ('Control', {
            'fields': (
                'created_at',
                'updated_at'
            )
        })
    )
