from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """Admin for accounts, listed by email"""

    list_display = ['email', 'name', 'is_staff', 'is_active', 'date_joined']
    search_fields = ['email', 'name']
    ordering = ['-date_joined']
    fieldsets = BaseUserAdmin.fieldsets + (
        ('Profile', {'fields': ('name',)}),
    )
