from datetime import timedelta
from unittest import mock

from django.db import IntegrityError, transaction
from django.test import TestCase, override_settings
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from accounts.models import User
from tablebook.exceptions import (
    AuthorizationError,
    ConflictError,
    InvalidEnumError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from tables.models import Table
from .models import Booking
from .services import AvailabilityHelper, BookingLifecycle


def booking_fields(**overrides):
    fields = {
        'name': 'Maria Silva',
        'email': 'maria@example.com',
        'phone': '555-0101',
        'date': timezone.localdate(),
        'time': '18:00',
        'guests': 2,
    }
    fields.update(overrides)
    return fields


class BookingModelTest(TestCase):
    """Tests for the Booking model"""

    def test_has_pre_order_follows_items(self):
        booking = Booking.objects.create(**booking_fields())
        self.assertFalse(booking.has_pre_order)
        self.assertEqual(booking.status, 'Pending')

        booking.pre_ordered_items = [{'name': 'Soup', 'quantity': 1}]
        booking.save()
        self.assertTrue(booking.has_pre_order)

    def test_transitions(self):
        booking = Booking(**booking_fields())

        self.assertTrue(booking.can_transition_to('Confirmed'))
        self.assertTrue(booking.can_transition_to('Completed'))
        self.assertTrue(booking.can_transition_to('Cancelled'))
        self.assertFalse(booking.can_transition_to('Pending'))

        booking.status = 'Confirmed'
        self.assertFalse(booking.can_transition_to('Pending'))
        self.assertTrue(booking.can_transition_to('Completed'))

        booking.status = 'Cancelled'
        self.assertFalse(booking.can_transition_to('Confirmed'))
        self.assertFalse(booking.can_cancel())

    def test_hour(self):
        booking = Booking(**booking_fields(time='09:30'))
        self.assertEqual(booking.hour, 9)

    def test_duplicate_active_slot_rejected_by_database(self):
        """Two active bookings cannot hold the same table slot"""
        table = Table.objects.create(table_number=1, capacity=4)
        Booking.objects.create(**booking_fields(table_id=table.pk))

        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                Booking.objects.create(**booking_fields(table_id=table.pk, email='other@example.com'))

    def test_cancelled_booking_frees_slot_in_database(self):
        table = Table.objects.create(table_number=1, capacity=4)
        Booking.objects.create(**booking_fields(table_id=table.pk, status='Cancelled'))

        booking = Booking.objects.create(**booking_fields(table_id=table.pk))
        self.assertEqual(booking.status, 'Pending')


class AvailabilityHelperTest(TestCase):
    """Tests for slot availability"""

    def setUp(self):
        self.table = Table.objects.create(table_number=1, capacity=4)
        self.day = timezone.localdate()
        Booking.objects.create(**booking_fields(table_id=self.table.pk, date=self.day, time='18:00'))

    def test_exact_time_conflicts(self):
        self.assertFalse(AvailabilityHelper.is_table_free(self.table.pk, self.day, '18:00'))

    def test_other_times_are_free(self):
        """Durations are ignored: 18:30 does not overlap 18:00"""
        self.assertTrue(AvailabilityHelper.is_table_free(self.table.pk, self.day, '18:30'))
        self.assertTrue(AvailabilityHelper.is_table_free(self.table.pk, self.day + timedelta(days=1), '18:00'))

    def test_terminal_bookings_do_not_block(self):
        Booking.objects.filter(table_id=self.table.pk).update(status='Cancelled')
        self.assertTrue(AvailabilityHelper.is_table_free(self.table.pk, self.day, '18:00'))

    def test_exclude_booking(self):
        booking = Booking.objects.get(table_id=self.table.pk)
        self.assertTrue(
            AvailabilityHelper.is_table_free(self.table.pk, self.day, '18:00', exclude_booking_id=booking.pk)
        )

    def test_time_without_date_ignored(self):
        tables = AvailabilityHelper.list_available_tables(time='18:00')
        self.assertEqual(list(tables), [self.table])


class BookingLifecycleTest(TestCase):
    """Tests for the booking lifecycle and its table side effects"""

    def setUp(self):
        self.table = Table.objects.create(table_number=5, capacity=4, table_name='Window')
        self.today = timezone.localdate()

    def test_create_reserves_table(self):
        booking = BookingLifecycle.create(**booking_fields(table_id=self.table.pk))

        self.table.refresh_from_db()
        self.assertEqual(booking.status, 'Pending')
        self.assertEqual(self.table.status, 'reserved')

    def test_create_without_table(self):
        booking = BookingLifecycle.create(**booking_fields())

        self.assertIsNone(booking.table_id)
        self.table.refresh_from_db()
        self.assertEqual(self.table.status, 'available')

    def test_create_copies_table_snapshot(self):
        """Table number and name are copied at creation and kept afterwards"""
        booking = BookingLifecycle.create(**booking_fields(table_id=self.table.pk))
        self.assertEqual(booking.table_number, '5')
        self.assertEqual(booking.table_name, 'Window')

        self.table.table_name = 'Terrace'
        self.table.save()
        booking.refresh_from_db()
        self.assertEqual(booking.table_name, 'Window')

    def test_create_keeps_given_snapshot(self):
        booking = BookingLifecycle.create(**booking_fields(
            table_id=self.table.pk, table_number='5A', table_name='Corner'
        ))
        self.assertEqual(booking.table_number, '5A')
        self.assertEqual(booking.table_name, 'Corner')

    def test_create_conflict(self):
        BookingLifecycle.create(**booking_fields(table_id=self.table.pk))

        with self.assertRaises(ConflictError) as ctx:
            BookingLifecycle.create(**booking_fields(table_id=self.table.pk, email='other@example.com'))

        self.assertIn('already booked', str(ctx.exception.detail))
        self.assertEqual(Booking.objects.count(), 1)

    def test_create_race_lost_to_concurrent_booking(self):
        """The slot check passes but the database still refuses the duplicate"""
        BookingLifecycle.create(**booking_fields(table_id=self.table.pk))
        Table.objects.filter(pk=self.table.pk).update(status='occupied')

        with mock.patch.object(AvailabilityHelper, 'is_table_free', return_value=True):
            with self.assertRaises(ConflictError) as ctx:
                BookingLifecycle.create(**booking_fields(table_id=self.table.pk, email='other@example.com'))

        self.assertEqual(str(ctx.exception.detail), 'This table is already booked for the selected date and time')
        self.assertEqual(Booking.objects.count(), 1)
        self.table.refresh_from_db()
        self.assertEqual(self.table.status, 'occupied')

    def test_create_missing_fields(self):
        with self.assertRaises(ValidationError) as ctx:
            BookingLifecycle.create(**booking_fields(phone=''))

        self.assertEqual(str(ctx.exception.detail), 'Please fill all required fields')
        self.assertEqual(Booking.objects.count(), 0)

    def test_create_negative_guests(self):
        with self.assertRaises(ValidationError) as ctx:
            BookingLifecycle.create(**booking_fields(table_id=self.table.pk, guests=-1))

        self.assertEqual(str(ctx.exception.detail), 'Please fill all required fields')
        self.assertEqual(Booking.objects.count(), 0)

    def test_create_with_pre_order(self):
        booking = BookingLifecycle.create(**booking_fields(
            pre_ordered_items=[{'name': 'Pasta', 'quantity': 2, 'price': 12.5}],
            pre_order_total='25.00'
        ))
        self.assertTrue(booking.has_pre_order)

    def test_completed_releases_table(self):
        booking = BookingLifecycle.create(**booking_fields(table_id=self.table.pk))

        BookingLifecycle.set_status(booking.pk, 'Completed')

        self.table.refresh_from_db()
        self.assertEqual(self.table.status, 'available')

    def test_release_blocked_by_other_booking_today(self):
        first = BookingLifecycle.create(**booking_fields(table_id=self.table.pk, time='18:00'))
        BookingLifecycle.create(**booking_fields(table_id=self.table.pk, time='21:00', email='b@example.com'))

        BookingLifecycle.set_status(first.pk, 'Cancelled')

        self.table.refresh_from_db()
        self.assertEqual(self.table.status, 'reserved')

    def test_release_ignores_other_days_by_default(self):
        """Only today's bookings keep a table reserved"""
        later = self.today + timedelta(days=2)
        first = BookingLifecycle.create(**booking_fields(table_id=self.table.pk, date=later))
        BookingLifecycle.create(**booking_fields(table_id=self.table.pk, date=later, time='21:00'))

        BookingLifecycle.set_status(first.pk, 'Completed')

        self.table.refresh_from_db()
        self.assertEqual(self.table.status, 'available')

    @override_settings(BOOKINGS={'RELEASE_WINDOW': 'booking_date'})
    def test_release_window_booking_date(self):
        later = self.today + timedelta(days=2)
        first = BookingLifecycle.create(**booking_fields(table_id=self.table.pk, date=later))
        BookingLifecycle.create(**booking_fields(table_id=self.table.pk, date=later, time='21:00'))

        BookingLifecycle.set_status(first.pk, 'Completed')

        self.table.refresh_from_db()
        self.assertEqual(self.table.status, 'reserved')

    def test_confirmed_reserves_table(self):
        booking = BookingLifecycle.create(**booking_fields(table_id=self.table.pk))
        self.table.status = 'available'
        self.table.save()

        BookingLifecycle.set_status(booking.pk, 'Confirmed')

        self.table.refresh_from_db()
        self.assertEqual(self.table.status, 'reserved')

    def test_terminal_status_cannot_change(self):
        booking = BookingLifecycle.create(**booking_fields(table_id=self.table.pk))
        BookingLifecycle.set_status(booking.pk, 'Cancelled')

        with self.assertRaises(InvalidStateError):
            BookingLifecycle.set_status(booking.pk, 'Confirmed')

    def test_same_status_rejected(self):
        booking = BookingLifecycle.create(**booking_fields())

        with self.assertRaises(InvalidStateError):
            BookingLifecycle.set_status(booking.pk, 'Pending')

    def test_invalid_status(self):
        booking = BookingLifecycle.create(**booking_fields())

        with self.assertRaises(InvalidEnumError):
            BookingLifecycle.set_status(booking.pk, 'Done')

    def test_missing_booking(self):
        with self.assertRaises(NotFoundError):
            BookingLifecycle.set_status(9999, 'Confirmed')

    def test_cancel_wrong_email(self):
        booking = BookingLifecycle.create(**booking_fields(table_id=self.table.pk))

        with self.assertRaises(AuthorizationError) as ctx:
            BookingLifecycle.cancel_by_user(booking.pk, 'someone@example.com')

        self.assertEqual(str(ctx.exception.detail), 'Booking not found or unauthorized')
        booking.refresh_from_db()
        self.assertEqual(booking.status, 'Pending')

    def test_cancel_by_user(self):
        booking = BookingLifecycle.create(**booking_fields(table_id=self.table.pk))

        BookingLifecycle.cancel_by_user(booking.pk, 'maria@example.com')

        booking.refresh_from_db()
        self.table.refresh_from_db()
        self.assertEqual(booking.status, 'Cancelled')
        self.assertEqual(self.table.status, 'available')

    def test_cancel_completed_booking(self):
        booking = BookingLifecycle.create(**booking_fields())
        BookingLifecycle.set_status(booking.pk, 'Completed')

        with self.assertRaises(InvalidStateError) as ctx:
            BookingLifecycle.cancel_by_user(booking.pk, 'maria@example.com')

        self.assertEqual(str(ctx.exception.detail), 'Cannot cancel a completed booking')

    def test_cancel_cancelled_booking(self):
        booking = BookingLifecycle.create(**booking_fields(table_id=self.table.pk))
        BookingLifecycle.cancel_by_user(booking.pk, 'maria@example.com')

        with self.assertRaises(InvalidStateError) as ctx:
            BookingLifecycle.cancel_by_user(booking.pk, 'maria@example.com')

        self.assertEqual(str(ctx.exception.detail), 'Cannot cancel a cancelled booking')

    def test_delete_releases_table(self):
        booking = BookingLifecycle.create(**booking_fields(table_id=self.table.pk))

        BookingLifecycle.delete(booking.pk)

        self.table.refresh_from_db()
        self.assertFalse(Booking.objects.exists())
        self.assertEqual(self.table.status, 'available')

    def test_status_change_after_table_deleted(self):
        """A booking whose table is gone can still change status"""
        booking = BookingLifecycle.create(**booking_fields(table_id=self.table.pk))
        self.table.delete()

        booking = BookingLifecycle.set_status(booking.pk, 'Completed')
        self.assertEqual(booking.status, 'Completed')

    def test_for_user_matches_email_or_phone(self):
        BookingLifecycle.create(**booking_fields(email='a@example.com', phone='111'))
        BookingLifecycle.create(**booking_fields(email='b@example.com', phone='222'))
        BookingLifecycle.create(**booking_fields(email='c@example.com', phone='333'))

        bookings = BookingLifecycle.for_user(email='a@example.com', phone='222')
        self.assertEqual({b.email for b in bookings}, {'a@example.com', 'b@example.com'})

        with self.assertRaises(ValidationError):
            BookingLifecycle.for_user()


class BookingAPITest(APITestCase):
    """Tests for the booking endpoints"""

    def setUp(self):
        self.staff = User.objects.create_user(
            email='admin@restaurant.com',
            name='Admin',
            username='admin',
            password='StrongPass123',
            is_staff=True
        )
        self.table = Table.objects.create(table_number=5, capacity=4)

    def book(self, **overrides):
        payload = {
            'name': 'Maria Silva',
            'email': 'maria@example.com',
            'phone': '555-0101',
            'date': '2024-06-01',
            'time': '18:00',
            'guests': 2,
            'tableId': self.table.pk,
        }
        payload.update(overrides)
        return self.client.post(reverse('booking-list'), payload)

    def test_booking_scenario(self):
        """Book, reject the duplicate, complete and release the table"""
        response = self.book()

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['success'])
        self.assertEqual(response.data['message'], 'Table booked successfully!')
        self.assertEqual(response.data['tableNumber'], '5')
        self.assertFalse(response.data['hasPreOrder'])
        booking_id = response.data['bookingId']

        self.table.refresh_from_db()
        self.assertEqual(self.table.status, 'reserved')

        response = self.book(email='other@example.com')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertFalse(response.data['success'])
        self.assertIn('already booked', response.data['message'])

        self.client.force_authenticate(user=self.staff)
        response = self.client.post(
            reverse('booking-update-status', args=[booking_id]), {'status': 'Completed'}
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['status'], 'Completed')

        self.table.refresh_from_db()
        self.assertEqual(self.table.status, 'available')

    def test_book_with_pre_order(self):
        response = self.book(
            preOrderedItems=[{'name': 'Pasta', 'quantity': 2}],
            preOrderTotal='24.00'
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['message'], 'Table booked with food pre-order!')
        self.assertTrue(response.data['hasPreOrder'])

    def test_book_missing_fields(self):
        response = self.client.post(reverse('booking-list'), {'name': 'Maria'})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data, {'success': False, 'message': 'Please fill all required fields'})

    def test_book_zero_guests(self):
        response = self.book(guests=0)

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Please fill all required fields')

    def test_get_booking(self):
        booking_id = self.book().data['bookingId']

        response = self.client.get(reverse('booking-detail', args=[booking_id]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['tableId'], self.table.pk)
        self.assertEqual(response.data['data']['status'], 'Pending')

    def test_get_missing_booking(self):
        response = self.client.get(reverse('booking-detail', args=[9999]))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data, {'success': False, 'message': 'Booking not found'})

    def test_list_requires_staff(self):
        self.book()

        response = self.client.get(reverse('booking-list'))
        self.assertIn(response.status_code, [status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN])

        self.client.force_authenticate(user=self.staff)
        response = self.client.get(reverse('booking-list'))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['data']), 1)

    def test_update_status_requires_staff(self):
        booking_id = self.book().data['bookingId']

        response = self.client.post(
            reverse('booking-update-status', args=[booking_id]), {'status': 'Confirmed'}
        )

        self.assertIn(response.status_code, [status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN])

    def test_update_status_invalid(self):
        booking_id = self.book().data['bookingId']
        self.client.force_authenticate(user=self.staff)

        response = self.client.post(
            reverse('booking-update-status', args=[booking_id]), {'status': 'Done'}
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Invalid status')

    def test_by_date_excludes_cancelled(self):
        self.book(time='20:00')
        cancelled_id = self.book(time='18:00', email='b@example.com').data['bookingId']
        self.book(time='12:00', tableId=None)
        Booking.objects.filter(pk=cancelled_id).update(status='Cancelled')

        response = self.client.get(reverse('booking-by-date'), {'date': '2024-06-01'})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([b['time'] for b in response.data['data']], ['12:00', '20:00'])

    def test_by_date_requires_date(self):
        response = self.client.get(reverse('booking-by-date'))

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Date is required')

    def test_user_bookings(self):
        self.book(email='a@example.com', phone='111', time='18:00')
        self.book(email='b@example.com', phone='222', time='19:00')
        self.book(email='c@example.com', phone='333', time='20:00')

        response = self.client.post(reverse('booking-user'), {'email': 'a@example.com', 'phone': '222'})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        emails = {b['email'] for b in response.data['data']}
        self.assertEqual(emails, {'a@example.com', 'b@example.com'})

    def test_user_bookings_requires_contact(self):
        response = self.client.post(reverse('booking-user'), {})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Email or phone is required')

    def test_user_bookings_malformed_email(self):
        """The email is only a lookup key; a bad one still matches by phone"""
        self.book(email='a@example.com', phone='111')

        response = self.client.post(reverse('booking-user'), {'email': 'not-an-email', 'phone': '111'})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([b['phone'] for b in response.data['data']], ['111'])

    def test_list_filtered_by_deleted_table(self):
        """Bookings keep their table id after the table is deleted"""
        booking_id = self.book().data['bookingId']
        other = Table.objects.create(table_number=6, capacity=2)
        self.book(tableId=other.pk, email='b@example.com')
        table_id = self.table.pk
        self.table.delete()
        self.client.force_authenticate(user=self.staff)

        response = self.client.get(reverse('booking-list'), {'table': table_id})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([b['id'] for b in response.data['data']], [booking_id])

    def test_cancel_booking(self):
        booking_id = self.book().data['bookingId']

        response = self.client.post(reverse('booking-cancel', args=[booking_id]), {'email': 'maria@example.com'})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'Booking cancelled successfully')
        self.table.refresh_from_db()
        self.assertEqual(self.table.status, 'available')

    def test_cancel_booking_wrong_email(self):
        booking_id = self.book().data['bookingId']

        response = self.client.post(reverse('booking-cancel', args=[booking_id]), {'email': 'x@example.com'})

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['message'], 'Booking not found or unauthorized')

    def test_delete_booking(self):
        booking_id = self.book().data['bookingId']
        self.client.force_authenticate(user=self.staff)

        response = self.client.delete(reverse('booking-detail', args=[booking_id]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'Booking deleted successfully')
        self.assertFalse(Booking.objects.filter(pk=booking_id).exists())
