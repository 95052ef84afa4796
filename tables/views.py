from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.response import Response
from django_filters.rest_framework import DjangoFilterBackend

from bookings.services import AvailabilityHelper, parse_date
from tablebook.exceptions import ValidationError
from tablebook.permissions import IsStaffOrPublicAction
from tablebook.responses import success_response
from .models import Table
from .serializers import (
    TableSerializer,
    TableUpdateSerializer,
    TableWithBookingsSerializer,
    TableStatusSerializer,
)
from .services import TableAdminHelper


class TableViewSet(viewsets.ModelViewSet):
    """
    ViewSet for restaurant tables.

    list: all tables with today's bookings (staff)
    retrieve: one table (public)
    create: add a table (staff)
    update / partial_update: change table details (staff)
    destroy: delete a table, its bookings are kept (staff)
    available: tables free for a date/time and party size (public)
    status: set the table status (staff)
    toggle_active: activate or deactivate a table (staff)
    """

    queryset = Table.objects.all()
    serializer_class = TableSerializer
    permission_classes = [IsStaffOrPublicAction]
    public_actions = ['retrieve', 'available']
    filter_backends = [DjangoFilterBackend]
    filterset_fields = ['status', 'is_active', 'location']
    lookup_value_regex = r'\d+'

    def get_serializer_class(self):
        """Returns the serializer for each action"""
        if self.action == 'list':
            return TableWithBookingsSerializer
        if self.action in ['update', 'partial_update']:
            return TableUpdateSerializer
        return TableSerializer

    def list(self, request, *args, **kwargs):
        tables = TableAdminHelper.list_with_bookings(self.filter_queryset(self.get_queryset()))
        serializer = self.get_serializer(tables, many=True)
        return Response(success_response(serializer.data))

    def retrieve(self, request, pk=None):
        table = TableAdminHelper.get(pk)
        return Response(success_response(self.get_serializer(table).data))

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        table = TableAdminHelper.add(serializer.validated_data)

        return Response(
            success_response(TableSerializer(table).data, 'Table added successfully'),
            status=status.HTTP_201_CREATED
        )

    def update(self, request, pk=None, **kwargs):
        """Every update is partial"""
        table = TableAdminHelper.get(pk)
        serializer = self.get_serializer(table, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        table = TableAdminHelper.update(table, serializer.validated_data)

        return Response(success_response(TableSerializer(table).data, 'Table updated successfully'))

    def partial_update(self, request, pk=None, **kwargs):
        return self.update(request, pk=pk)

    def destroy(self, request, pk=None):
        TableAdminHelper.delete(pk)
        return Response(success_response(message='Table deleted successfully'))

    @action(detail=False, methods=['get'])
    def available(self, request):
        """
        Tables a booking can use.

        Query params:
        - date (optional): YYYY-MM-DD
        - time (optional): HH:MM, only applied together with date
        - guests (optional): minimum capacity
        """
        date_str = request.query_params.get('date')
        time_str = request.query_params.get('time')
        guests = request.query_params.get('guests')

        date = parse_date(date_str) if date_str else None

        min_guests = None
        if guests:
            try:
                min_guests = int(guests)
            except ValueError:
                raise ValidationError('Invalid number of guests')

        tables = AvailabilityHelper.list_available_tables(
            date=date,
            time=time_str,
            min_guests=min_guests
        )
        return Response(success_response(TableSerializer(tables, many=True).data))

    @action(detail=True, methods=['post'], url_path='status')
    def update_status(self, request, pk=None):
        """Body: { "status": "available"|"occupied"|"reserved"|"maintenance" }"""
        serializer = TableStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        table = TableAdminHelper.update_status(pk, serializer.validated_data['status'])

        return Response(success_response(TableSerializer(table).data, 'Table status updated'))

    @action(detail=True, methods=['post'], url_path='toggle-active')
    def toggle_active(self, request, pk=None):
        table = TableAdminHelper.toggle_active(pk)
        message = 'Table activated' if table.is_active else 'Table deactivated'
        return Response(success_response(TableSerializer(table).data, message))
