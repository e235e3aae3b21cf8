# Generated migration for clinical app - patients and appointments

import uuid
from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('authz', '0001_initial'),
        ('core', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Patient',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('first_name', models.CharField(max_length=100)),
                ('last_name', models.CharField(max_length=100)),
                ('full_name', models.CharField(blank=True, default='', max_length=255)),
                ('full_name_lower', models.CharField(blank=True, default='', max_length=255)),
                ('birth_date', models.DateField(blank=True, null=True)),
                ('email', models.CharField(blank=True, default='', max_length=255)),
                ('email_normalized', models.CharField(blank=True, default='', max_length=255)),
                ('phone', models.CharField(blank=True, default='', max_length=50)),
                ('phone_normalized', models.CharField(blank=True, default='', max_length=50)),
                ('legacy_email', models.CharField(blank=True, default='', max_length=255)),
                ('legacy_phone', models.CharField(blank=True, default='', max_length=50)),
                ('address', models.TextField(blank=True, default='')),
                ('consent_to_treatment', models.BooleanField(default=False)),
                ('search_tokens', models.JSONField(blank=True, default=list)),
                ('status', models.CharField(choices=[('active', 'Active'), ('archived', 'Archived')], default='active', max_length=20)),
                ('created_from', models.CharField(choices=[('publicBooking', 'Public booking'), ('manual', 'Manual')], default='manual', max_length=20)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('clinic', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='patients', to='core.clinic')),
                ('created_by_user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='created_patients', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Patient',
                'verbose_name_plural': 'Patients',
                'db_table': 'patient',
                'indexes': [
                    models.Index(fields=['clinic', 'last_name', 'first_name'], name='idx_patient_name'),
                    models.Index(fields=['clinic', 'email_normalized'], name='idx_patient_email_norm'),
                    models.Index(fields=['clinic', 'phone_normalized'], name='idx_patient_phone_norm'),
                    models.Index(fields=['clinic', 'full_name_lower'], name='idx_patient_full_name'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Appointment',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('kind', models.CharField(choices=[('admin', 'Admin'), ('new', 'New patient'), ('followup', 'Follow-up')], default='followup', max_length=20)),
                ('service_id', models.CharField(blank=True, default='', max_length=100)),
                ('service_name', models.CharField(blank=True, default='', max_length=255)),
                ('start', models.DateTimeField()),
                ('end', models.DateTimeField()),
                ('status', models.CharField(choices=[('booked', 'Booked'), ('confirmed', 'Confirmed'), ('completed', 'Completed'), ('cancelled', 'Cancelled'), ('no_show', 'No Show')], default='booked', max_length=20)),
                ('patient_name', models.CharField(blank=True, default='', max_length=255)),
                ('practitioner_name', models.CharField(blank=True, default='', max_length=255)),
                ('resource_ids', models.JSONField(blank=True, default=list)),
                ('created_from', models.CharField(choices=[('publicBooking', 'Public booking'), ('manual', 'Manual')], default='manual', max_length=20)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('clinic', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='appointments', to='core.clinic')),
                ('practitioner', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='appointments', to='authz.practitioner')),
                ('patient', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='appointments', to='clinical.patient')),
                ('created_by_user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='created_appointments', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Appointment',
                'verbose_name_plural': 'Appointments',
                'db_table': 'appointment',
                'indexes': [
                    models.Index(fields=['clinic', 'practitioner', 'start'], name='idx_appointment_prac_start'),
                    models.Index(fields=['clinic', 'start'], name='idx_appointment_start'),
                    models.Index(fields=['status'], name='idx_appointment_status'),
                ],
            },
        ),
    ]
