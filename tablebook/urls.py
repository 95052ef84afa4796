"""
URL configuration for tablebook project.

Every API endpoint lives under /api/ and is registered on a single router.
"""
from django.contrib import admin
from django.urls import path, include
from rest_framework.routers import DefaultRouter
from rest_framework_simplejwt.views import TokenRefreshView

from accounts.views import UserViewSet
from tables.views import TableViewSet
from bookings.views import BookingViewSet

router = DefaultRouter()
router.register(r'user', UserViewSet, basename='user')
router.register(r'tables', TableViewSet, basename='table')
router.register(r'bookings', BookingViewSet, basename='booking')

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/', include(router.urls)),
    path('api/token/refresh/', TokenRefreshView.as_view(), name='token_refresh'),
]
