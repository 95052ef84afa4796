from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    """Customer or staff account, authenticated by email"""

    name = models.CharField(max_length=150, verbose_name="Name")
    email = models.EmailField(unique=True, verbose_name="Email")

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['username', 'name']

    class Meta:
        verbose_name = "User"
        verbose_name_plural = "Users"
        ordering = ['-date_joined']

    def __str__(self):
        return f"{self.name} ({self.email})"

    @staticmethod
    def username_from_email(email):
        """Derives a unique username from the local part of the email"""
        base = email.split('@')[0] or 'user'
        username = base
        suffix = 1
        while User.objects.filter(username=username).exists():
            suffix += 1
            username = f"{base}{suffix}"
        return username
