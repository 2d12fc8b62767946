"""
URL mappings for the clinic portal API.

Trailing slashes are omitted throughout (``APPEND_SLASH`` is off).
"""
from django.urls import include, path

from .views import (
    appointments,
    audit_logs,
    auth,
    dashboard,
    departments,
    doctors,
    faq,
    health,
    medical_records,
    nurses,
    patient_requests,
    patients,
    prescriptions,
    rooms,
    shifts,
)

urlpatterns = [
    # auth
    path('api/auth/login', auth.login_view, name='auth-login'),
    path('api/auth/refresh', auth.refresh_view, name='auth-refresh'),
    path('api/auth/logout', auth.logout_view, name='auth-logout'),
    path('api/auth/change-password', auth.change_password_view, name='auth-change-password'),

    # appointments
    path('api/appointments', appointments.appointment_list, name='appointment-list'),
    path('api/appointments/<int:pk>', appointments.appointment_detail, name='appointment-detail'),
    path('api/appointments/by-doctor/<uuid:doctor_id>', appointments.appointments_by_doctor,
         name='appointments-by-doctor'),
    path('api/appointments/by-patient/<int:patient_id>', appointments.appointments_by_patient,
         name='appointments-by-patient'),

    # departments
    path('api/departments', departments.department_list, name='department-list'),
    path('api/departments/<int:pk>', departments.department_detail, name='department-detail'),
    path('api/departments/<int:pk>/doctors', departments.department_doctors, name='department-doctors'),
    path('api/departments/<int:pk>/doctors/<uuid:doctor_id>', departments.department_doctor_remove,
         name='department-doctor-remove'),

    # staff
    path('api/doctors', doctors.doctor_list, name='doctor-list'),
    path('api/doctors/<uuid:pk>', doctors.doctor_detail, name='doctor-detail'),
    path('api/nurses', nurses.nurse_list, name='nurse-list'),
    path('api/nurses/<uuid:pk>', nurses.nurse_detail, name='nurse-detail'),

    # faq
    path('api/faq', faq.faq_list, name='faq-list'),
    path('api/faq/<int:pk>', faq.faq_detail, name='faq-detail'),

    # medical records
    path('api/medical-records', medical_records.record_list, name='record-list'),
    path('api/medical-records/doctor', medical_records.records_by_me, name='records-by-me'),
    path('api/medical-records/patient/<int:patient_id>', medical_records.records_for_patient,
         name='records-for-patient'),
    path('api/medical-records/prescriptions/<int:pk>', medical_records.record_prescriptions,
         name='record-prescriptions'),
    path('api/medical-records/<int:pk>', medical_records.record_detail, name='record-detail'),

    # patients
    path('api/patients', patients.patient_list, name='patient-list'),
    path('api/patients/<int:pk>', patients.patient_detail, name='patient-detail'),

    # prescriptions
    path('api/prescriptions', prescriptions.prescription_list, name='prescription-list'),
    path('api/prescriptions/for-record', prescriptions.prescription_for_record, name='prescription-for-record'),
    path('api/prescriptions/edit-medical/<int:pk>', prescriptions.prescription_edit_medical,
         name='prescription-edit-medical'),
    path('api/prescriptions/delete-medical/<int:pk>', prescriptions.prescription_delete_medical,
         name='prescription-delete-medical'),
    path('api/prescriptions/<int:pk>', prescriptions.prescription_detail, name='prescription-detail'),

    # rooms
    path('api/rooms', rooms.room_list, name='room-list'),
    path('api/rooms/<int:pk>', rooms.room_detail, name='room-detail'),
    path('api/rooms/<int:pk>/availability', rooms.room_availability, name='room-availability'),
    path('api/rooms/department/<int:department_id>', rooms.rooms_by_department, name='rooms-by-department'),

    # shifts
    path('api/shifts', shifts.shift_list, name='shift-list'),
    path('api/shifts/mine', shifts.my_shifts, name='shift-mine'),
    path('api/shifts/urgent-alert', shifts.urgent_alert, name='urgent-alert'),
    path('api/shifts/<int:pk>', shifts.shift_detail, name='shift-detail'),

    # registration
    path('api/patient-requests', patient_requests.request_list, name='patient-request-list'),
    path('api/patient-requests/<int:pk>', patient_requests.request_detail, name='patient-request-detail'),
    path('api/patient-requests/<int:pk>/approve', patient_requests.request_approve, name='patient-request-approve'),
    path('api/patient-requests/<int:pk>/reject', patient_requests.request_reject, name='patient-request-reject'),

    # admin
    path('api/audit-logs', audit_logs.audit_log_list, name='audit-log-list'),
    path('api/dashboard', dashboard.admin_dashboard, name='dashboard'),
    path('api/calendar', dashboard.calendar, name='calendar'),

    # ops
    path('healthz', health.healthz, name='healthz'),
    path('', include('django_prometheus.urls')),
]
