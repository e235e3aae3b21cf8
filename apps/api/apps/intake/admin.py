from django.contrib import admin

from .models import IntakeInvite, IntakeSession


@admin.register(IntakeSession)
class IntakeSessionAdmin(admin.ModelAdmin):
    list_display = ['id', 'clinic', 'status', 'flow_id', 'created_from', 'created_at']
    list_filter = ['status', 'flow_id']
    readonly_fields = ['id', 'created_at', 'updated_at', 'submitted_at']
    raw_id_fields = ['appointment', 'patient', 'practitioner']


@admin.register(IntakeInvite)
class IntakeInviteAdmin(admin.ModelAdmin):
    list_display = ['id', 'clinic', 'appointment', 'expires_at', 'claimed_at', 'used_at']
    readonly_fields = ['id', 'token_hash', 'created_at', 'claimed_at', 'used_at']
    raw_id_fields = ['appointment', 'patient', 'intake_session', 'claimed_session']
