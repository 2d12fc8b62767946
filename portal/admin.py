"""
Django admin registrations for the portal models.

The audit log is append-only; the admin shows it read-only.
"""

from django.contrib import admin

from .models import (
    Appointment,
    AuditLog,
    Department,
    Doctor,
    DoctorDepartment,
    FAQEntry,
    MedicalRecord,
    Nurse,
    Patient,
    PatientRequest,
    Prescription,
    Room,
    Shift,
    User,
)


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ('username', 'full_name', 'role', 'must_change_password', 'is_active')
    list_filter = ('role', 'must_change_password', 'is_active')
    search_fields = ('username', 'full_name', 'email')


@admin.register(Department)
class DepartmentAdmin(admin.ModelAdmin):
    list_display = ('id', 'name')
    search_fields = ('name',)


class DoctorDepartmentInline(admin.TabularInline):
    model = DoctorDepartment
    extra = 0


@admin.register(Doctor)
class DoctorAdmin(admin.ModelAdmin):
    list_display = ('id', 'user', 'profession', 'years_of_experience')
    search_fields = ('user__username', 'user__full_name', 'profession')
    inlines = [DoctorDepartmentInline]


@admin.register(Patient)
class PatientAdmin(admin.ModelAdmin):
    list_display = ('id', 'user', 'gender', 'blood_type')
    search_fields = ('user__username', 'user__full_name')


@admin.register(Nurse)
class NurseAdmin(admin.ModelAdmin):
    list_display = ('id', 'user', 'phone_number', 'years_of_experience')
    search_fields = ('user__username', 'user__full_name')


@admin.register(Appointment)
class AppointmentAdmin(admin.ModelAdmin):
    list_display = ('id', 'doctor', 'patient', 'appointment_date', 'status')
    list_filter = ('status',)


class PrescriptionInline(admin.TabularInline):
    model = Prescription
    extra = 0


@admin.register(MedicalRecord)
class MedicalRecordAdmin(admin.ModelAdmin):
    list_display = ('id', 'patient', 'doctor', 'diagnosis', 'created_at')
    search_fields = ('diagnosis',)
    inlines = [PrescriptionInline]


@admin.register(Prescription)
class PrescriptionAdmin(admin.ModelAdmin):
    list_display = ('id', 'medical_record', 'medication_name', 'dosage', 'frequency')


@admin.register(Room)
class RoomAdmin(admin.ModelAdmin):
    list_display = ('id', 'room_number', 'room_type', 'department', 'is_available')
    list_filter = ('department', 'is_available')


@admin.register(Shift)
class ShiftAdmin(admin.ModelAdmin):
    list_display = ('id', 'staff', 'role', 'start_time', 'end_time', 'is_repeating_weekly')
    list_filter = ('role',)


@admin.register(PatientRequest)
class PatientRequestAdmin(admin.ModelAdmin):
    list_display = ('id', 'full_name', 'user_name', 'status', 'requested_at')
    list_filter = ('status',)


@admin.register(FAQEntry)
class FAQEntryAdmin(admin.ModelAdmin):
    list_display = ('id', 'question', 'created_at')


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ('created_at', 'action', 'entity_name', 'entity_id', 'performed_by')
    list_filter = ('action', 'entity_name')
    readonly_fields = ('action', 'entity_name', 'entity_id', 'details', 'created_at', 'performed_by')

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
