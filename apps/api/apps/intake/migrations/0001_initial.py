# Generated migration for intake app - intake sessions and invites

import uuid
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('core', '0001_initial'),
        ('authz', '0001_initial'),
        ('clinical', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='IntakeSession',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('status', models.CharField(choices=[('draft', 'Draft'), ('submitted', 'Submitted')], default='draft', max_length=20)),
                ('flow_id', models.CharField(blank=True, default='', max_length=50)),
                ('flow_version', models.CharField(default='v1', max_length=20)),
                ('answers', models.JSONField(blank=True, default=dict)),
                ('created_from', models.CharField(blank=True, default='', max_length=20)),
                ('submitted_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('clinic', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='intake_sessions', to='core.clinic')),
                ('appointment', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='intake_sessions', to='clinical.appointment')),
                ('patient', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='intake_sessions', to='clinical.patient')),
                ('practitioner', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='intake_sessions', to='authz.practitioner')),
            ],
            options={
                'verbose_name': 'Intake Session',
                'verbose_name_plural': 'Intake Sessions',
                'db_table': 'intake_session',
                'indexes': [models.Index(fields=['clinic', 'status'], name='idx_intake_session_status')],
            },
        ),
        migrations.CreateModel(
            name='IntakeInvite',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('patient_email_normalized', models.CharField(blank=True, default='', max_length=255)),
                ('token_hash', models.CharField(max_length=64, unique=True)),
                ('expires_at', models.DateTimeField()),
                ('used_at', models.DateTimeField(blank=True, null=True)),
                ('claimed_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('clinic', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='intake_invites', to='core.clinic')),
                ('appointment', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='intake_invites', to='clinical.appointment')),
                ('patient', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='intake_invites', to='clinical.patient')),
                ('intake_session', models.ForeignKey(blank=True, help_text='Session prepared when the invite was issued', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='issued_invites', to='intake.intakesession')),
                ('claimed_session', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='claimed_invites', to='intake.intakesession')),
            ],
            options={
                'verbose_name': 'Intake Invite',
                'verbose_name_plural': 'Intake Invites',
                'db_table': 'intake_invite',
                'indexes': [models.Index(fields=['clinic', 'appointment'], name='idx_intake_invite_appt')],
            },
        ),
    ]
