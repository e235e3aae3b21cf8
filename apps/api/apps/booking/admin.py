from django.contrib import admin

from .models import BookingRequest


@admin.register(BookingRequest)
class BookingRequestAdmin(admin.ModelAdmin):
    list_display = ['id', 'clinic', 'status', 'start_at', 'practitioner_id', 'created_at']
    list_filter = ['status', 'source']
    search_fields = ['id', 'practitioner_id', 'patient_last_name']
    readonly_fields = [
        'id', 'created_at', 'updated_at', 'notification_lock_at', 'notification_sent_at',
        'pre_assessment_url',
    ]
    raw_id_fields = ['requester', 'appointment', 'patient', 'intake_invite']
    fieldsets = (
        ('Request', {
            'fields': ('id', 'clinic', 'practitioner_id', 'clinician_id', 'start_at', 'end_at', 'tz', 'locale', 'kind', 'source')
        }),
        ('Patient', {
            'fields': (
                'patient_first_name', 'patient_last_name', 'patient_birth_date',
                'patient_email', 'patient_phone', 'patient_address', 'patient_consent_to_treatment',
            )
        }),
        ('Appointment Block', {
            'fields': ('appointment_minutes', 'appointment_label', 'appointment_price_text', 'appointment_description')
        }),
        ('Resolution', {
            'fields': ('status', 'rejection_reason', 'appointment', 'patient', 'intake_invite', 'pre_assessment_url')
        }),
        ('Audit', {
            'fields': ('requester', 'notification_lock_at', 'notification_sent_at', 'created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    def has_delete_permission(self, request, obj=None):
        return False
