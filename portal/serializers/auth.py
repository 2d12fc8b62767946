from rest_framework import serializers


class LoginSerializer(serializers.Serializer):
    username = serializers.CharField()
    password = serializers.CharField(write_only=True)

    def validate_username(self, v):
        v = (v or '').strip()
        if not v:
            raise serializers.ValidationError('Username is required.')
        return v


class ChangePasswordSerializer(serializers.Serializer):
    current_password = serializers.CharField(write_only=True)
    new_password = serializers.CharField(write_only=True, min_length=8)
    confirm_password = serializers.CharField(write_only=True, required=False)

    def validate(self, attrs):
        confirm = attrs.get('confirm_password')
        if confirm is not None and confirm != attrs['new_password']:
            raise serializers.ValidationError({'confirm_password': ['Passwords do not match.']})
        return attrs
