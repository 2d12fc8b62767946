from rest_framework import serializers

from portal.models import Appointment, Doctor, MedicalRecord, Patient, Prescription
from portal.serializers.common import SanitizedModelSerializer


class AppointmentSerializer(SanitizedModelSerializer):
    doctor = serializers.PrimaryKeyRelatedField(queryset=Doctor.objects.select_related('user'))
    patient = serializers.PrimaryKeyRelatedField(queryset=Patient.objects.select_related('user'))
    doctor_name = serializers.CharField(source='doctor.full_name', read_only=True)
    patient_name = serializers.CharField(source='patient.full_name', read_only=True)

    class Meta:
        model = Appointment
        fields = ['id', 'doctor', 'doctor_name', 'patient', 'patient_name', 'appointment_date', 'status',
                  'notes', 'created_at']
        read_only_fields = ['created_at']


class PrescriptionSerializer(SanitizedModelSerializer):
    class Meta:
        model = Prescription
        fields = ['id', 'medical_record', 'medication_name', 'dosage', 'frequency', 'duration',
                  'instructions', 'created_at']
        read_only_fields = ['created_at']


class PrescriptionForRecordSerializer(SanitizedModelSerializer):
    """Doctor-facing shape: the record is addressed by ``medical_record_id``."""
    medical_record_id = serializers.IntegerField()

    class Meta:
        model = Prescription
        fields = ['id', 'medical_record_id', 'medication_name', 'dosage', 'frequency', 'duration',
                  'instructions', 'created_at']
        read_only_fields = ['created_at']


class MedicalRecordSerializer(SanitizedModelSerializer):
    doctor = serializers.PrimaryKeyRelatedField(queryset=Doctor.objects.all(), required=False)
    patient = serializers.PrimaryKeyRelatedField(queryset=Patient.objects.all())
    appointment = serializers.PrimaryKeyRelatedField(queryset=Appointment.objects.all(), required=False,
                                                     allow_null=True)
    doctor_name = serializers.CharField(source='doctor.full_name', read_only=True)
    patient_name = serializers.CharField(source='patient.full_name', read_only=True)
    prescriptions = PrescriptionSerializer(many=True, read_only=True)

    class Meta:
        model = MedicalRecord
        fields = ['id', 'patient', 'patient_name', 'doctor', 'doctor_name', 'appointment', 'diagnosis',
                  'prescription', 'notes', 'created_at', 'prescriptions']
        read_only_fields = ['created_at']

    def validate(self, attrs):
        appointment = attrs.get('appointment')
        patient = attrs.get('patient', getattr(self.instance, 'patient', None))
        if appointment is not None and patient is not None and appointment.patient_id != patient.pk:
            raise serializers.ValidationError({'appointment': ['Appointment belongs to a different patient.']})
        return attrs
