from rest_framework import serializers

from portal.models import WEEKDAYS, Department, Doctor, DoctorDepartment, Nurse, Room, Shift, User
from portal.serializers.common import SanitizedModelSerializer


class DepartmentSerializer(SanitizedModelSerializer):
    class Meta:
        model = Department
        fields = ['id', 'name', 'description']


class ProfileSerializer(SanitizedModelSerializer):
    """Base for profiles that own a login identity.

    ``full_name`` is written to the identity; ``username`` and ``email``
    are generated and read-only.
    """
    full_name = serializers.CharField(max_length=255)
    username = serializers.CharField(source='user.username', read_only=True)
    email = serializers.CharField(source='user.email', read_only=True)
    user_id = serializers.IntegerField(read_only=True)


class DoctorSerializer(ProfileSerializer):
    departments = serializers.PrimaryKeyRelatedField(many=True, queryset=Department.objects.all(), required=False)

    class Meta:
        model = Doctor
        fields = ['id', 'user_id', 'full_name', 'username', 'email', 'profession', 'years_of_experience',
                  'address', 'gender', 'date_of_birth', 'departments']


class NurseSerializer(ProfileSerializer):
    class Meta:
        model = Nurse
        fields = ['id', 'user_id', 'full_name', 'username', 'email', 'gender', 'date_of_birth', 'address',
                  'phone_number', 'years_of_experience', 'created_at']
        read_only_fields = ['created_at']


class DoctorAssignmentSerializer(serializers.ModelSerializer):
    doctor_name = serializers.CharField(source='doctor.full_name', read_only=True)

    class Meta:
        model = DoctorDepartment
        fields = ['id', 'doctor', 'doctor_name', 'department', 'assigned_at']
        read_only_fields = fields


class AssignDoctorSerializer(serializers.Serializer):
    doctor_id = serializers.UUIDField()


class RoomSerializer(SanitizedModelSerializer):
    department_name = serializers.CharField(source='department.name', read_only=True)

    class Meta:
        model = Room
        fields = ['id', 'room_number', 'room_type', 'is_available', 'description', 'department',
                  'department_name', 'created_at']
        read_only_fields = ['created_at']


class ShiftSerializer(serializers.ModelSerializer):
    staff = serializers.PrimaryKeyRelatedField(
        queryset=User.objects.filter(role__in=[User.ROLE_DOCTOR, User.ROLE_NURSE, User.ROLE_ADMIN])
    )
    staff_name = serializers.CharField(source='staff.display_name', read_only=True)
    days_of_week = serializers.ListField(child=serializers.ChoiceField(choices=WEEKDAYS), allow_empty=False)
    # follows the staff member's account role
    role = serializers.CharField(read_only=True)

    class Meta:
        model = Shift
        fields = ['id', 'staff', 'staff_name', 'days_of_week', 'start_time', 'end_time',
                  'is_repeating_weekly', 'role']

    def validate_days_of_week(self, value):
        # keep calendar order, drop duplicates
        return [d for d in WEEKDAYS if d in set(value)]

    def validate(self, attrs):
        start = attrs.get('start_time', getattr(self.instance, 'start_time', None))
        end = attrs.get('end_time', getattr(self.instance, 'end_time', None))
        if start is not None and end is not None and start > end:
            raise serializers.ValidationError({'end_time': ['Shift must end after it starts on the same day.']})
        return attrs


class UrgentAlertSerializer(serializers.Serializer):
    department_id = serializers.IntegerField(min_value=1)
    room_id = serializers.IntegerField(min_value=1)
