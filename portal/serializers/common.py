import bleach
from rest_framework import serializers

from portal.models import AuditLog, FAQEntry


def clean_text(value: str) -> str:
    return bleach.clean((value or '').strip(), tags=[], strip=True)


class SanitizedModelSerializer(serializers.ModelSerializer):
    """Strips markup from every free-text input field."""

    def to_internal_value(self, data):
        values = super().to_internal_value(data)
        for field in self._writable_fields:
            if isinstance(field, serializers.CharField) and not isinstance(field, serializers.EmailField):
                if isinstance(values.get(field.source), str):
                    values[field.source] = clean_text(values[field.source])
        return values


class FAQEntrySerializer(SanitizedModelSerializer):
    class Meta:
        model = FAQEntry
        fields = ['id', 'question', 'answer', 'created_at']
        read_only_fields = ['created_at']


class AuditLogSerializer(serializers.ModelSerializer):
    performed_by = serializers.SlugRelatedField(slug_field='username', read_only=True)

    class Meta:
        model = AuditLog
        fields = ['id', 'action', 'entity_name', 'entity_id', 'details', 'created_at', 'performed_by']
        read_only_fields = fields
