# Generated migration for notifications app - settings and delivery log

import uuid
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('core', '0001_initial'),
        ('clinical', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='NotificationSettings',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('default_locale', models.CharField(default='en', max_length=10)),
                ('events', models.JSONField(blank=True, default=dict)),
                ('reply_to_email', models.EmailField(blank=True, default='', max_length=254)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('clinic', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='notification_settings', to='core.clinic')),
            ],
            options={
                'verbose_name': 'Notification Settings',
                'verbose_name_plural': 'Notification Settings',
                'db_table': 'notification_settings',
            },
        ),
        migrations.CreateModel(
            name='NotificationLog',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('event_id', models.CharField(choices=[('booking.created.patientConfirmation', 'Booking confirmation (patient)'), ('booking.created.clinicianNotification', 'New booking (clinician)')], max_length=100)),
                ('recipient', models.CharField(max_length=255)),
                ('provider', models.CharField(default='email', max_length=50)),
                ('message_id', models.CharField(blank=True, default='', max_length=255)),
                ('status', models.CharField(choices=[('accepted', 'Accepted'), ('skipped', 'Skipped'), ('error', 'Error')], max_length=20)),
                ('error_message', models.CharField(blank=True, default='', max_length=500)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('clinic', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='notification_logs', to='core.clinic')),
                ('appointment', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='notification_logs', to='clinical.appointment')),
            ],
            options={
                'verbose_name': 'Notification Log',
                'verbose_name_plural': 'Notification Logs',
                'db_table': 'notification_log',
                'ordering': ['-created_at'],
                'indexes': [models.Index(fields=['clinic', 'event_id', 'created_at'], name='idx_notif_log_event')],
            },
        ),
    ]
