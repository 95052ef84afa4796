import logging

from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework_simplejwt.tokens import RefreshToken

from .serializers import UserSerializer, LoginSerializer, RegisterSerializer

logger = logging.getLogger(__name__)


def token_payload(user):
    refresh = RefreshToken.for_user(user)
    return {
        'success': True,
        'token': str(refresh.access_token),
        'refresh': str(refresh),
    }


class UserViewSet(viewsets.GenericViewSet):
    """
    Authentication endpoints used by the login popup.

    login: exchange email/password for a JWT
    register: create a customer account and log it in
    me: current user's profile
    """
    serializer_class = UserSerializer

    @action(detail=False, methods=['post'], permission_classes=[AllowAny])
    def login(self, request):
        serializer = LoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.validated_data['user']
        logger.info("User logged in: %s", user.email)
        return Response(token_payload(user), status=status.HTTP_200_OK)

    @action(detail=False, methods=['post'], permission_classes=[AllowAny])
    def register(self, request):
        serializer = RegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        logger.info("User registered: %s", user.email)
        return Response(token_payload(user), status=status.HTTP_201_CREATED)

    @action(detail=False, methods=['get'], permission_classes=[IsAuthenticated])
    def me(self, request):
        return Response({'success': True, 'data': self.get_serializer(request.user).data})
