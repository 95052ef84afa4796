from datetime import datetime, time, timedelta

from django.db import IntegrityError, transaction
from django.test import TestCase
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from accounts.models import User
from bookings.models import Booking
from tablebook.exceptions import ConflictError, InvalidEnumError, NotFoundError
from .models import Table
from .services import TableAdminHelper


class TableModelTest(TestCase):
    """Tests for the Table model"""

    def test_create_table_defaults(self):
        """A new table is indoor, available and active"""
        table = Table.objects.create(table_number=1, capacity=4)

        self.assertEqual(table.location, 'indoor')
        self.assertEqual(table.status, 'available')
        self.assertTrue(table.is_active)
        self.assertEqual(table.features, [])
        self.assertEqual(table.min_booking_hours, 1)
        self.assertEqual(table.price_per_hour, 0)

    def test_default_table_name(self):
        """Table name defaults to 'Table <number>'"""
        table = Table.objects.create(table_number=7, capacity=2)
        self.assertEqual(table.table_name, 'Table 7')

        named = Table.objects.create(table_number=8, capacity=2, table_name='Window')
        self.assertEqual(named.table_name, 'Window')

    def test_table_str(self):
        table = Table.objects.create(table_number=5, capacity=4, location='outdoor', status='reserved')
        self.assertEqual(str(table), 'Table 5 - Outdoor (Reserved)')

    def test_table_number_unique(self):
        """Two tables cannot share a number"""
        Table.objects.create(table_number=1, capacity=4)

        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                Table.objects.create(table_number=1, capacity=2)

    def test_valid_statuses(self):
        for value in ['available', 'occupied', 'reserved', 'maintenance']:
            self.assertTrue(Table.is_valid_status(value))
        self.assertFalse(Table.is_valid_status('broken'))


class TableAdminHelperTest(TestCase):
    """Tests for table administration"""

    def setUp(self):
        self.table = TableAdminHelper.add({'table_number': 5, 'capacity': 4})

    def test_add_duplicate_number(self):
        """Adding a second table with an existing number fails"""
        with self.assertRaises(ConflictError) as ctx:
            TableAdminHelper.add({'table_number': 5, 'capacity': 6})

        self.assertEqual(str(ctx.exception.detail), 'Table number already exists')
        self.assertEqual(Table.objects.count(), 1)

    def test_update_to_existing_number(self):
        other = TableAdminHelper.add({'table_number': 6, 'capacity': 2})

        with self.assertRaises(ConflictError):
            TableAdminHelper.update(other, {'table_number': 5})

    def test_update_fields(self):
        table = TableAdminHelper.update(self.table, {'capacity': 6, 'location': 'outdoor'})
        table.refresh_from_db()

        self.assertEqual(table.capacity, 6)
        self.assertEqual(table.location, 'outdoor')

    def test_update_status(self):
        table = TableAdminHelper.update_status(self.table.pk, 'maintenance')
        self.assertEqual(table.status, 'maintenance')

    def test_update_status_invalid(self):
        with self.assertRaises(InvalidEnumError):
            TableAdminHelper.update_status(self.table.pk, 'closed')

    def test_update_status_missing_table(self):
        with self.assertRaises(NotFoundError):
            TableAdminHelper.update_status(9999, 'available')

    def test_toggle_active(self):
        table = TableAdminHelper.toggle_active(self.table.pk)
        self.assertFalse(table.is_active)

        table = TableAdminHelper.toggle_active(self.table.pk)
        self.assertTrue(table.is_active)

    def test_delete_keeps_bookings(self):
        """Deleting a table leaves its bookings with the old reference"""
        booking = Booking.objects.create(
            name='A', email='a@x.com', phone='123',
            date=timezone.localdate(), time='18:00', guests=2,
            table_id=self.table.pk, table_number='5'
        )
        table_id = self.table.pk

        TableAdminHelper.delete(table_id)

        booking.refresh_from_db()
        self.assertFalse(Table.objects.filter(pk=table_id).exists())
        self.assertEqual(booking.table_id, table_id)
        self.assertEqual(booking.table_number, '5')

    def test_sync_status_ignores_missing_table(self):
        self.assertFalse(TableAdminHelper.sync_status(9999, 'reserved'))
        self.assertTrue(TableAdminHelper.sync_status(self.table.pk, 'reserved'))

        self.table.refresh_from_db()
        self.assertEqual(self.table.status, 'reserved')

    def test_list_with_bookings(self):
        """Listing annotates today's bookings, upcoming count and current use"""
        today = timezone.localdate()
        now = timezone.make_aware(datetime.combine(today, time(19, 0)))
        quiet = TableAdminHelper.add({'table_number': 2, 'capacity': 2})

        def book(table, day, at, status='Pending'):
            return Booking.objects.create(
                name='Guest', email='g@x.com', phone='1',
                date=day, time=at, guests=2, table_id=table.pk, status=status
            )

        book(self.table, today, '18:00')
        book(self.table, today, '21:00', status='Cancelled')
        book(self.table, today + timedelta(days=3), '18:00')
        book(self.table, today + timedelta(days=7), '18:00')
        book(self.table, today + timedelta(days=8), '18:00')
        book(quiet, today, '12:00')

        tables = TableAdminHelper.list_with_bookings(now=now)

        self.assertEqual([t.table_number for t in tables], [2, 5])
        quiet_row, busy_row = tables

        self.assertEqual(len(busy_row.today_bookings), 1)
        self.assertEqual(busy_row.today_bookings[0].time, '18:00')
        self.assertEqual(busy_row.upcoming_bookings_count, 2)
        self.assertTrue(busy_row.is_currently_booked)

        self.assertEqual(len(quiet_row.today_bookings), 1)
        self.assertEqual(quiet_row.upcoming_bookings_count, 0)
        self.assertFalse(quiet_row.is_currently_booked)


class TableAPITest(APITestCase):
    """Tests for the table endpoints"""

    def setUp(self):
        self.staff = User.objects.create_user(
            email='admin@restaurant.com',
            name='Admin',
            username='admin',
            password='StrongPass123',
            is_staff=True
        )
        self.customer = User.objects.create_user(
            email='customer@restaurant.com',
            name='Customer',
            username='customer',
            password='StrongPass123'
        )

    def test_add_table(self):
        self.client.force_authenticate(user=self.staff)
        response = self.client.post(reverse('table-list'), {
            'tableNumber': 5,
            'capacity': 4,
            'features': ['window'],
            'pricePerHour': '10.00'
        })

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['success'])
        self.assertEqual(response.data['message'], 'Table added successfully')
        self.assertEqual(response.data['data']['tableNumber'], 5)
        self.assertEqual(response.data['data']['tableName'], 'Table 5')
        self.assertEqual(response.data['data']['status'], 'available')
        self.assertTrue(response.data['data']['isActive'])

    def test_add_duplicate_table(self):
        Table.objects.create(table_number=5, capacity=4)
        self.client.force_authenticate(user=self.staff)

        response = self.client.post(reverse('table-list'), {'tableNumber': 5, 'capacity': 2})

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data, {'success': False, 'message': 'Table number already exists'})

    def test_add_table_requires_staff(self):
        self.client.force_authenticate(user=self.customer)
        response = self.client.post(reverse('table-list'), {'tableNumber': 1, 'capacity': 2})

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertFalse(response.data['success'])

    def test_anonymous_cannot_list(self):
        response = self.client.get(reverse('table-list'))

        self.assertIn(response.status_code, [status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN])
        self.assertFalse(response.data['success'])

    def test_list_tables_sorted_with_annotations(self):
        Table.objects.create(table_number=3, capacity=2)
        Table.objects.create(table_number=1, capacity=6)
        self.client.force_authenticate(user=self.staff)

        response = self.client.get(reverse('table-list'))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        numbers = [row['tableNumber'] for row in response.data['data']]
        self.assertEqual(numbers, [1, 3])
        first = response.data['data'][0]
        self.assertEqual(first['todayBookings'], [])
        self.assertEqual(first['upcomingBookingsCount'], 0)
        self.assertFalse(first['isCurrentlyBooked'])

    def test_get_table(self):
        table = Table.objects.create(table_number=4, capacity=4)

        response = self.client.get(reverse('table-detail', args=[table.pk]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['tableNumber'], 4)

    def test_get_missing_table(self):
        response = self.client.get(reverse('table-detail', args=[9999]))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data, {'success': False, 'message': 'Table not found'})

    def test_available_tables_capacity(self):
        """Only capacity-4 tables and a party of 6 gives an empty list"""
        Table.objects.create(table_number=1, capacity=4)
        Table.objects.create(table_number=2, capacity=4)

        response = self.client.get(
            reverse('table-available'),
            {'date': '2024-06-01', 'time': '19:00', 'guests': 6}
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['success'])
        self.assertEqual(response.data['data'], [])

    def test_available_tables_filters_and_order(self):
        """Smallest table first; inactive, maintenance and booked tables excluded"""
        big = Table.objects.create(table_number=1, capacity=8)
        small = Table.objects.create(table_number=2, capacity=2)
        booked = Table.objects.create(table_number=3, capacity=4)
        Table.objects.create(table_number=4, capacity=4, status='maintenance')
        Table.objects.create(table_number=5, capacity=4, is_active=False)

        Booking.objects.create(
            name='A', email='a@x.com', phone='1', date='2024-06-01',
            time='19:00', guests=2, table_id=booked.pk
        )

        response = self.client.get(reverse('table-available'), {'date': '2024-06-01', 'time': '19:00'})
        ids = [row['id'] for row in response.data['data']]
        self.assertEqual(ids, [small.pk, big.pk])

        # Another time on the same day leaves the booked table free
        response = self.client.get(reverse('table-available'), {'date': '2024-06-01', 'time': '20:00'})
        ids = [row['id'] for row in response.data['data']]
        self.assertEqual(ids, [small.pk, booked.pk, big.pk])

    def test_available_tables_invalid_date(self):
        response = self.client.get(reverse('table-available'), {'date': '01/06/2024', 'time': '19:00'})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(response.data['success'])

    def test_update_table_allow_list(self):
        """Status cannot be changed through the generic update"""
        table = Table.objects.create(table_number=1, capacity=4)
        self.client.force_authenticate(user=self.staff)

        response = self.client.patch(reverse('table-detail', args=[table.pk]), {
            'capacity': 6,
            'description': 'Corner',
            'status': 'maintenance',
            'isActive': False
        })

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        table.refresh_from_db()
        self.assertEqual(table.capacity, 6)
        self.assertEqual(table.description, 'Corner')
        self.assertEqual(table.status, 'available')
        self.assertFalse(table.is_active)

    def test_update_status_endpoint(self):
        table = Table.objects.create(table_number=1, capacity=4)
        self.client.force_authenticate(user=self.staff)

        response = self.client.post(reverse('table-update-status', args=[table.pk]), {'status': 'occupied'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['status'], 'occupied')

        response = self.client.post(reverse('table-update-status', args=[table.pk]), {'status': 'closed'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Invalid status')

    def test_toggle_active_endpoint(self):
        table = Table.objects.create(table_number=1, capacity=4)
        self.client.force_authenticate(user=self.staff)

        response = self.client.post(reverse('table-toggle-active', args=[table.pk]))

        self.assertEqual(response.data['message'], 'Table deactivated')
        self.assertFalse(response.data['data']['isActive'])

    def test_delete_table(self):
        table = Table.objects.create(table_number=1, capacity=4)
        self.client.force_authenticate(user=self.staff)

        response = self.client.delete(reverse('table-detail', args=[table.pk]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'Table deleted successfully')
        self.assertFalse(Table.objects.filter(pk=table.pk).exists())
