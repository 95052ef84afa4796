from django.contrib.auth import password_validation
from rest_framework import serializers

from .models import User


class UserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ('id', 'email', 'name', 'is_staff', 'date_joined')
        read_only_fields = fields


class RegisterSerializer(serializers.Serializer):
    """Public sign up: name, email and password"""
    name = serializers.CharField(max_length=150)
    email = serializers.EmailField(error_messages={'invalid': 'Please enter a valid email'})
    password = serializers.CharField(
        write_only=True,
        style={'input_type': 'password'}
    )

    def validate_email(self, value):
        if User.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError('User already exists')
        return value.lower()

    def validate_password(self, value):
        password_validation.validate_password(value)
        return value

    def create(self, validated_data):
        email = validated_data['email']
        return User.objects.create_user(
            username=User.username_from_email(email),
            email=email,
            name=validated_data['name'],
            password=validated_data['password'],
        )


class LoginSerializer(serializers.Serializer):
    """Login with email and password"""
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, style={'input_type': 'password'})

    def validate(self, data):
        try:
            user = User.objects.get(email__iexact=data.get('email'))
        except User.DoesNotExist:
            raise serializers.ValidationError({'email': "User doesn't exist"})

        if not user.is_active or not user.check_password(data.get('password')):
            raise serializers.ValidationError({'password': 'Invalid credentials'})

        data['user'] = user
        return data
