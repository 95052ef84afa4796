from django.contrib import admin
from .models import Table


@admin.register(Table)
class TableAdmin(admin.ModelAdmin):
    """Admin for the Table model"""

    list_display = [
        'table_number',
        'table_name',
        'capacity',
        'location',
        'status',
        'is_active',
        'price_per_hour'
    ]

    list_filter = ['status', 'location', 'is_active']
    search_fields = ['table_name', 'description']
    list_editable = ['status', 'is_active']
    ordering = ['table_number']

    readonly_fields = ['created_at', 'updated_at']

    fieldsets = (
        ('Table', {
            'fields': ('table_number', 'table_name', 'capacity', 'location', 'features')
        }),
        ('Pricing', {
            'fields': ('min_booking_hours', 'price_per_hour', 'description')
        }),
        ('Status', {
            'fields': ('status', 'is_active', 'created_at', 'updated_at')
        }),
    )
