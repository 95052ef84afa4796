from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.filters import SearchFilter, OrderingFilter
from rest_framework.response import Response
from django_filters.rest_framework import DjangoFilterBackend

from tablebook.exceptions import ValidationError
from tablebook.permissions import IsStaffOrPublicAction
from tablebook.responses import success_response
from .filters import BookingFilter
from .models import Booking
from .serializers import (
    BookingSerializer,
    BookingCreateSerializer,
    BookingStatusSerializer,
    UserBookingsSerializer,
    CancelBookingSerializer,
)
from .services import BookingLifecycle, parse_date


class BookingViewSet(viewsets.GenericViewSet):
    """
    ViewSet for table bookings.

    create: book a table, optionally with a food pre-order (public)
    list: all bookings, newest first (staff)
    retrieve: one booking (public)
    destroy: delete a booking in any status (staff)
    status: move a booking to another status (staff)
    by_date: non-cancelled bookings of a day (public)
    user: bookings of a customer by email or phone (public)
    cancel: customer cancellation, checked against the booking email (public)
    """

    queryset = Booking.objects.all()
    serializer_class = BookingSerializer
    permission_classes = [IsStaffOrPublicAction]
    public_actions = ['create', 'retrieve', 'by_date', 'user', 'cancel']
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]
    filterset_class = BookingFilter
    search_fields = ['name', 'email', 'phone']
    ordering_fields = ['date', 'time', 'created_at']
    ordering = ['-created_at']
    lookup_value_regex = r'\d+'

    def create(self, request):
        serializer = BookingCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = BookingLifecycle.create(**serializer.validated_data)

        message = 'Table booked with food pre-order!' if booking.has_pre_order else 'Table booked successfully!'
        return Response(
            success_response(
                message=message,
                bookingId=booking.pk,
                hasPreOrder=booking.has_pre_order,
                tableNumber=booking.table_number,
            ),
            status=status.HTTP_201_CREATED
        )

    def list(self, request):
        queryset = self.filter_queryset(self.get_queryset())
        return Response(success_response(self.get_serializer(queryset, many=True).data))

    def retrieve(self, request, pk=None):
        booking = BookingLifecycle.get(pk)
        return Response(success_response(self.get_serializer(booking).data))

    def destroy(self, request, pk=None):
        BookingLifecycle.delete(pk)
        return Response(success_response(message='Booking deleted successfully'))

    @action(detail=True, methods=['post'], url_path='status')
    def update_status(self, request, pk=None):
        """Body: { "status": "Pending"|"Confirmed"|"Completed"|"Cancelled" }"""
        serializer = BookingStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = BookingLifecycle.set_status(pk, serializer.validated_data['status'])

        return Response(success_response(self.get_serializer(booking).data, 'Booking status updated'))

    @action(detail=False, methods=['get'], url_path='by-date')
    def by_date(self, request):
        """Query params: date (YYYY-MM-DD, required)"""
        date_str = request.query_params.get('date')
        if not date_str:
            raise ValidationError('Date is required')

        bookings = BookingLifecycle.for_date(parse_date(date_str)).order_by('time')
        return Response(success_response(self.get_serializer(bookings, many=True).data))

    @action(detail=False, methods=['post'])
    def user(self, request):
        """Body: { "email": ..., "phone": ... }, either one or both"""
        serializer = UserBookingsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        bookings = BookingLifecycle.for_user(
            email=serializer.validated_data.get('email'),
            phone=serializer.validated_data.get('phone')
        )
        return Response(success_response(self.get_serializer(bookings, many=True).data))

    @action(detail=True, methods=['post'])
    def cancel(self, request, pk=None):
        """Body: { "email": ... } matching the booking"""
        serializer = CancelBookingSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        BookingLifecycle.cancel_by_user(pk, serializer.validated_data['email'])

        return Response(success_response(message='Booking cancelled successfully'))
