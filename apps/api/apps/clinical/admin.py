from django.contrib import admin

from .models import Appointment, Patient


@admin.register(Patient)
class PatientAdmin(admin.ModelAdmin):
    list_display = ['first_name', 'last_name', 'email', 'phone', 'clinic', 'status', 'created_from', 'created_at']
    list_filter = ['status', 'created_from']
    search_fields = ['first_name', 'last_name', 'email_normalized', 'phone_normalized', 'full_name_lower']
    readonly_fields = ['id', 'search_tokens', 'created_at', 'updated_at']

    fieldsets = (
        ('Basic Info', {
            'fields': ('id', 'clinic', 'first_name', 'last_name', 'full_name', 'full_name_lower', 'birth_date')
        }),
        ('Contact', {
            'fields': ('email', 'email_normalized', 'phone', 'phone_normalized', 'address')
        }),
        ('Legacy contact', {
            'fields': ('legacy_email', 'legacy_phone')
        }),
        ('Status', {
            'fields': ('status', 'consent_to_treatment', 'created_from', 'search_tokens')
        }),
        ('Audit', {
            'fields': ('created_by_user', 'created_at', 'updated_at')
        }),
    )


@admin.register(Appointment)
class AppointmentAdmin(admin.ModelAdmin):
    list_display = ['start', 'end', 'practitioner_name', 'patient_name', 'kind', 'status', 'created_from']
    list_filter = ['status', 'kind', 'created_from']
    search_fields = ['patient_name', 'practitioner_name', 'service_name']
    readonly_fields = ['id', 'created_at', 'updated_at']
    raw_id_fields = ['patient', 'practitioner', 'created_by_user']
