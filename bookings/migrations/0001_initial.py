import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('tables', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Booking',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200, verbose_name='Name')),
                ('email', models.EmailField(max_length=254, verbose_name='Email')),
                ('phone', models.CharField(max_length=30, verbose_name='Phone')),
                ('date', models.DateField(verbose_name='Date')),
                ('time', models.CharField(max_length=5, validators=[django.core.validators.RegexValidator('^([01]\\d|2[0-3]):[0-5]\\d$', 'Time must be in HH:MM format.')], verbose_name='Time')),
                ('guests', models.PositiveIntegerField(validators=[django.core.validators.MinValueValidator(1)], verbose_name='Guests')),
                ('table_number', models.CharField(blank=True, max_length=20, verbose_name='Table Number')),
                ('table_name', models.CharField(blank=True, max_length=100, verbose_name='Table Name')),
                ('occasion', models.CharField(blank=True, max_length=100, verbose_name='Occasion')),
                ('special_requests', models.TextField(blank=True, verbose_name='Special Requests')),
                ('status', models.CharField(choices=[('Pending', 'Pending'), ('Confirmed', 'Confirmed'), ('Completed', 'Completed'), ('Cancelled', 'Cancelled')], default='Pending', max_length=20, verbose_name='Status')),
                ('pre_ordered_items', models.JSONField(blank=True, default=list, verbose_name='Pre-ordered Items')),
                ('pre_order_total', models.DecimalField(decimal_places=2, default=0, max_digits=10, verbose_name='Pre-order Total')),
                ('has_pre_order', models.BooleanField(default=False, editable=False, verbose_name='Has Pre-order')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='Created At')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='Updated At')),
                ('table', models.ForeignKey(blank=True, db_constraint=False, null=True, on_delete=django.db.models.deletion.DO_NOTHING, related_name='bookings', to='tables.table', verbose_name='Table')),
            ],
            options={
                'verbose_name': 'Booking',
                'verbose_name_plural': 'Bookings',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['table', 'date', 'time'], name='booking_table_slot_idx'),
                    models.Index(fields=['status'], name='booking_status_idx'),
                    models.Index(fields=['email'], name='booking_email_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(condition=models.Q(('status__in', ['Pending', 'Confirmed'])), fields=('table', 'date', 'time'), name='unique_active_booking_per_slot'),
                ],
            },
        ),
    ]
