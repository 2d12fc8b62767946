from rest_framework import serializers

from portal.models import Patient, PatientRequest
from portal.serializers.staff import ProfileSerializer
from portal.serializers.common import SanitizedModelSerializer

BLOOD_TYPES = ['A+', 'A-', 'B+', 'B-', 'AB+', 'AB-', 'O+', 'O-']


class PatientSerializer(ProfileSerializer):
    blood_type = serializers.ChoiceField(choices=BLOOD_TYPES, required=False, allow_blank=True)

    class Meta:
        model = Patient
        fields = ['id', 'user_id', 'full_name', 'username', 'email', 'date_of_birth', 'gender', 'address',
                  'major', 'blood_type']


class PatientRequestSerializer(SanitizedModelSerializer):
    blood_type = serializers.ChoiceField(choices=BLOOD_TYPES, required=False, allow_blank=True)

    class Meta:
        model = PatientRequest
        fields = ['id', 'full_name', 'user_name', 'date_of_birth', 'gender', 'address', 'major', 'blood_type',
                  'requested_at', 'status', 'decided_at', 'patient']
        read_only_fields = ['requested_at', 'status', 'decided_at', 'patient']

    def validate_full_name(self, v):
        if len(''.join(v.split())) < 2:
            raise serializers.ValidationError('Full name must have at least 2 characters.')
        return v
