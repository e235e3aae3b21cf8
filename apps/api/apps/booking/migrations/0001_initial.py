# Generated migration for booking app - booking requests

import uuid
from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('core', '0001_initial'),
        ('clinical', '0001_initial'),
        ('intake', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='BookingRequest',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('practitioner_id', models.CharField(blank=True, default='', max_length=64)),
                ('clinician_id', models.CharField(blank=True, default='', max_length=64)),
                ('start_at', models.DateTimeField(blank=True, null=True)),
                ('end_at', models.DateTimeField(blank=True, null=True)),
                ('tz', models.CharField(default='Europe/Prague', max_length=64)),
                ('locale', models.CharField(blank=True, default='', max_length=10)),
                ('kind', models.CharField(default='new', max_length=50)),
                ('patient_first_name', models.CharField(blank=True, default='', max_length=100)),
                ('patient_last_name', models.CharField(blank=True, default='', max_length=100)),
                ('patient_birth_date', models.DateField(blank=True, null=True)),
                ('patient_email', models.CharField(blank=True, default='', max_length=255)),
                ('patient_email_normalized', models.CharField(blank=True, default='', max_length=255)),
                ('patient_phone', models.CharField(blank=True, default='', max_length=50)),
                ('patient_phone_normalized', models.CharField(blank=True, default='', max_length=50)),
                ('patient_address', models.TextField(blank=True, default='')),
                ('patient_consent_to_treatment', models.BooleanField(default=False)),
                ('appointment_minutes', models.PositiveIntegerField()),
                ('appointment_label', models.CharField(blank=True, default='', max_length=255)),
                ('appointment_price_text', models.CharField(blank=True, default='', max_length=100)),
                ('appointment_description', models.TextField(blank=True, default='')),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('approved', 'Approved'), ('rejected', 'Rejected')], default='pending', max_length=20)),
                ('rejection_reason', models.CharField(blank=True, default='', max_length=500)),
                ('pre_assessment_url', models.URLField(blank=True, default='', max_length=1000)),
                ('source', models.CharField(choices=[('publicBookingApi', 'Public booking API'), ('admin', 'Admin')], default='publicBookingApi', max_length=30)),
                ('notification_lock_at', models.DateTimeField(blank=True, null=True)),
                ('notification_sent_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('clinic', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='booking_requests', to='core.clinic')),
                ('requester', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='booking_requests', to=settings.AUTH_USER_MODEL)),
                ('appointment', models.OneToOneField(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='booking_request', to='clinical.appointment')),
                ('patient', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='booking_requests', to='clinical.patient')),
                ('intake_invite', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='booking_requests', to='intake.intakeinvite')),
            ],
            options={
                'verbose_name': 'Booking Request',
                'verbose_name_plural': 'Booking Requests',
                'db_table': 'booking_request',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['clinic', 'status'], name='idx_booking_req_status'),
                    models.Index(fields=['requester', 'created_at'], name='idx_booking_req_requester'),
                ],
            },
        ),
    ]
