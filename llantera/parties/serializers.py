import re
from django.utils import timezone
from rest_framework import serializers
from .models import Company, Address, BillingInfo, CustomerRequest

RFC_PATTERN = re.compile(r'^[A-ZÑ&]{3,4}[0-9]{6}[A-Z0-9]{3}$')


def _clean_list(values):
    """Trim entries and drop the empty ones"""
    return [str(v).strip() for v in values or [] if str(v).strip()]


class CompanySerializer(serializers.ModelSerializer):
    emails = serializers.ListField(child=serializers.CharField(allow_blank=True), required=False)
    phones = serializers.ListField(child=serializers.CharField(allow_blank=True), required=False)

    class Meta:
        model = Company
        fields = ['id', 'key_name', 'social_reason', 'rfc', 'address', 'emails', 'phones',
                  'main_contact', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']

    def validate_key_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError('El nombre clave es obligatorio.')
        return value

    def validate_social_reason(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError('La razón social es obligatoria.')
        return value

    def validate_rfc(self, value):
        value = (value or '').strip().upper()
        if value and not RFC_PATTERN.match(value):
            raise serializers.ValidationError('RFC inválido.')
        return value

    def validate_emails(self, value):
        return _clean_list(value)

    def validate_phones(self, value):
        return _clean_list(value)


class AddressSerializer(serializers.ModelSerializer):
    alias = serializers.CharField(required=False, allow_blank=True, max_length=100)

    class Meta:
        model = Address
        fields = ['id', 'alias', 'street', 'exterior_number', 'interior_number', 'neighborhood',
                  'postal_code', 'city', 'state', 'reference', 'phone', 'is_default',
                  'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']

    def validate_alias(self, value):
        return value.strip() or 'Principal'

    def validate_postal_code(self, value):
        value = value.strip()
        if len(value) != 5:
            raise serializers.ValidationError('El código postal debe tener 5 caracteres.')
        return value

    def validate_phone(self, value):
        value = value.strip()
        if len(value) != 10:
            raise serializers.ValidationError('El teléfono debe tener 10 dígitos.')
        return value


class BillingInfoSerializer(serializers.ModelSerializer):

    class Meta:
        model = BillingInfo
        fields = ['id', 'rfc', 'razon_social', 'regimen_fiscal', 'uso_cfdi', 'postal_code',
                  'email', 'is_default', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']

    def validate_rfc(self, value):
        return value.strip().upper()

    def validate_postal_code(self, value):
        value = value.strip()
        if len(value) != 5:
            raise serializers.ValidationError('El código postal debe tener 5 caracteres.')
        return value


class CustomerRequestSerializer(serializers.ModelSerializer):
    employee_name = serializers.CharField(source='employee.full_name', read_only=True, default=None)

    class Meta:
        model = CustomerRequest
        fields = ['id', 'full_name', 'request_type', 'message', 'phone', 'contact_preference',
                  'email', 'status', 'employee', 'employee_name', 'agreement', 'attended_at',
                  'created_at', 'updated_at']
        read_only_fields = ['status', 'employee', 'agreement', 'attended_at', 'created_at', 'updated_at']

    def validate_full_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError('El nombre completo es obligatorio.')
        return value

    def validate_request_type(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError('El tipo de solicitud es obligatorio.')
        return value

    def validate_email(self, value):
        return value.strip().lower()


class CustomerRequestUpdateSerializer(serializers.ModelSerializer):
    """Back-office follow-up of a request"""
    status = serializers.ChoiceField(choices=CustomerRequest.STATUS_CHOICES, required=False,
                                     error_messages={'invalid_choice': 'Estado inválido.'})

    class Meta:
        model = CustomerRequest
        fields = ['message', 'agreement', 'status', 'employee']
        extra_kwargs = {
            'message': {'required': False},
            'agreement': {'required': False},
            'employee': {'required': False},
        }

    def update(self, instance, validated_data):
        new_status = validated_data.get('status')
        if new_status == 'atendida' and instance.status != 'atendida' and instance.attended_at is None:
            validated_data['attended_at'] = timezone.now()
        for field in ('message', 'agreement'):
            if field in validated_data:
                validated_data[field] = validated_data[field].strip()
        return super().update(instance, validated_data)
