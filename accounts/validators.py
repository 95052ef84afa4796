import re

from django.core.exceptions import ValidationError


class PasswordStrengthValidator:
    """
    Sign up password rule, registered in AUTH_PASSWORD_VALIDATORS:
    a minimum length, one uppercase letter and one digit.
    """

    def __init__(self, min_length=8):
        self.min_length = min_length

    def validate(self, password, user=None):
        if len(password) < self.min_length:
            raise ValidationError(
                f'Please enter a strong password of at least {self.min_length} characters.',
                code='password_too_short',
            )
        if not re.search(r'[A-Z]', password) or not re.search(r'\d', password):
            raise ValidationError(
                'Password needs an uppercase letter and a digit.',
                code='password_too_weak',
            )

    def get_help_text(self):
        return (
            f'Your password must have at least {self.min_length} characters, '
            'an uppercase letter and a digit.'
        )
