from rest_framework import serializers
from django.contrib.auth.password_validation import validate_password
from .models import User, AuditLog


class UserSerializer(serializers.ModelSerializer):
    name = serializers.CharField(source='full_name', read_only=True)
    company_name = serializers.CharField(source='company.key_name', read_only=True, default=None)
    price_level_code = serializers.SlugRelatedField(
        source='price_level', slug_field='code', read_only=True
    )

    class Meta:
        model = User
        fields = [
            'id', 'email', 'name', 'first_name', 'first_last_name', 'second_last_name',
            'phone', 'address_street', 'address_number', 'address_neighborhood',
            'address_postal_code', 'job_title', 'profile_image_url', 'is_active',
            'company', 'company_name', 'role', 'level', 'price_level', 'price_level_code',
            'created_at', 'updated_at',
        ]
        read_only_fields = ['created_at', 'updated_at']

    def validate_email(self, value):
        email = value.strip().lower()
        queryset = User.objects.filter(email__iexact=email)
        if self.instance is not None:
            queryset = queryset.exclude(pk=self.instance.pk)
        if queryset.exists():
            raise serializers.ValidationError('Ya existe un usuario con este correo.')
        return email

    def validate(self, attrs):
        role = attrs.get('role', getattr(self.instance, 'role', 'customer'))
        if role == 'employee':
            attrs['level'] = 'public'
            attrs['price_level'] = None
        return attrs


class UserCreateSerializer(UserSerializer):
    password = serializers.CharField(write_only=True, validators=[validate_password])

    class Meta(UserSerializer.Meta):
        fields = UserSerializer.Meta.fields + ['password']

    def create(self, validated_data):
        password = validated_data.pop('password')
        return User.objects.create_user(password=password, **validated_data)


class UserUpdateSerializer(UserSerializer):
    password = serializers.CharField(write_only=True, required=False, allow_blank=True, validators=[validate_password])

    class Meta(UserSerializer.Meta):
        fields = UserSerializer.Meta.fields + ['password']

    def update(self, instance, validated_data):
        password = validated_data.pop('password', '')
        user = super().update(instance, validated_data)
        if password:
            user.set_password(password)
            user.save(update_fields=['password'])
        return user


class AuditLogSerializer(serializers.ModelSerializer):
    user_email = serializers.CharField(source='user.email', read_only=True, default=None)

    class Meta:
        model = AuditLog
        fields = ['id', 'user', 'user_email', 'action', 'model_name', 'object_id', 'object_name',
                  'object_reference', 'changes', 'ip_address', 'created_at']
