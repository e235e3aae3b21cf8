# Generated migration for scheduling app - public booking settings, closures, busy blocks

import uuid
from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('core', '0001_initial'),
        ('authz', '0001_initial'),
        ('clinical', '0001_initial'),
        ('booking', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='PublicBookingSettings',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('timezone', models.CharField(default='Europe/Prague', max_length=64)),
                ('slot_step_minutes', models.PositiveSmallIntegerField(blank=True, null=True)),
                ('min_notice_minutes', models.PositiveIntegerField(blank=True, null=True)),
                ('max_advance_days', models.PositiveIntegerField(blank=True, null=True)),
                ('weekly_hours', models.JSONField(blank=True, default=dict)),
                ('opening_hours', models.JSONField(blank=True, default=dict)),
                ('corporate_programs', models.JSONField(blank=True, default=list)),
                ('practitioners', models.JSONField(blank=True, default=list)),
                ('public_base_url', models.URLField(blank=True, default='', max_length=500)),
                ('clinic_display_name', models.CharField(blank=True, default='', max_length=255)),
                ('logo_url', models.URLField(blank=True, default='', max_length=500)),
                ('contact_url', models.URLField(blank=True, default='', max_length=500)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('clinic', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='public_booking_settings', to='core.clinic')),
            ],
            options={
                'verbose_name': 'Public Booking Settings',
                'verbose_name_plural': 'Public Booking Settings',
                'db_table': 'public_booking_settings',
            },
        ),
        migrations.CreateModel(
            name='Closure',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('from_at', models.DateTimeField()),
                ('to_at', models.DateTimeField()),
                ('reason', models.CharField(blank=True, default='', max_length=255)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('clinic', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='closures', to='core.clinic')),
                ('created_by_user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='created_closures', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Closure',
                'verbose_name_plural': 'Closures',
                'db_table': 'closure',
                'indexes': [models.Index(fields=['clinic', 'is_active', 'from_at'], name='idx_closure_clinic_from')],
            },
        ),
        migrations.CreateModel(
            name='BusyBlock',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('start_at', models.DateTimeField()),
                ('end_at', models.DateTimeField()),
                ('status', models.CharField(choices=[('active', 'Active'), ('booked', 'Booked'), ('cancelled', 'Cancelled')], default='active', max_length=20)),
                ('scope', models.CharField(blank=True, choices=[('clinic', 'Clinic'), ('practitioner', 'Practitioner')], default='', max_length=20)),
                ('kind', models.CharField(blank=True, default='', max_length=50)),
                ('clinician_id', models.CharField(blank=True, default='', help_text='Legacy practitioner reference from older rows', max_length=64)),
                ('source', models.CharField(choices=[('public', 'Public booking'), ('reservation', 'Reservation'), ('manual', 'Manual')], default='manual', max_length=20)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('clinic', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='busy_blocks', to='core.clinic')),
                ('practitioner', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name='busy_blocks', to='authz.practitioner')),
                ('appointment', models.OneToOneField(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name='busy_block', to='clinical.appointment')),
                ('booking_request', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='busy_blocks', to='booking.bookingrequest')),
            ],
            options={
                'verbose_name': 'Busy Block',
                'verbose_name_plural': 'Busy Blocks',
                'db_table': 'busy_block',
                'indexes': [
                    models.Index(fields=['clinic', 'start_at'], name='idx_busy_block_clinic_start'),
                    models.Index(fields=['clinic', 'practitioner', 'start_at'], name='idx_busy_block_prac_start'),
                ],
            },
        ),
    ]
