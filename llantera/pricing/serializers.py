from rest_framework import serializers
from .models import PriceColumn, PriceLevel


class PriceColumnSerializer(serializers.ModelSerializer):
    base_code = serializers.CharField(source='base.code', read_only=True, default=None)

    class Meta:
        model = PriceColumn
        fields = [
            'id', 'code', 'name', 'description', 'display_order', 'is_active', 'is_public',
            'mode', 'base_code', 'operation', 'amount', 'created_at', 'updated_at'
        ]


class PriceColumnInputSerializer(serializers.Serializer):
    """Shape checks only; business rules live in pricing.services"""
    code = serializers.CharField(max_length=50, required=False, allow_blank=True)
    name = serializers.CharField(max_length=200, required=False, allow_blank=True)
    description = serializers.CharField(required=False, allow_blank=True)
    display_order = serializers.IntegerField(required=False)
    is_active = serializers.BooleanField(required=False)
    is_public = serializers.BooleanField(required=False)
    mode = serializers.CharField(max_length=20, required=False, allow_blank=True)
    base_code = serializers.CharField(max_length=50, required=False, allow_blank=True, allow_null=True)
    operation = serializers.CharField(max_length=20, required=False, allow_blank=True)
    amount = serializers.DecimalField(max_digits=10, decimal_places=4, required=False, allow_null=True)


class DependentResolutionSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=50)
    action = serializers.ChoiceField(choices=['fixed', 'change_base'])
    base_code = serializers.CharField(max_length=50, required=False, allow_blank=True)


class PriceColumnDeleteSerializer(serializers.Serializer):
    dependents = DependentResolutionSerializer(many=True, required=False)
    transfer_to_code = serializers.CharField(max_length=50, required=False, allow_blank=True)


class PriceLevelSerializer(serializers.ModelSerializer):
    price_column = serializers.SlugRelatedField(slug_field='code', queryset=PriceColumn.objects.all())
    reference_column = serializers.SlugRelatedField(
        slug_field='code', queryset=PriceColumn.objects.all(), required=False, allow_null=True
    )
    discount_percentage = serializers.DecimalField(max_digits=5, decimal_places=2, min_value=0, max_value=100, required=False)
    users_count = serializers.IntegerField(source='users.count', read_only=True)

    class Meta:
        model = PriceLevel
        fields = [
            'id', 'code', 'name', 'description', 'discount_percentage', 'price_column',
            'reference_column', 'can_view_offers', 'users_count', 'created_at', 'updated_at'
        ]
        read_only_fields = ['created_at', 'updated_at']

    def validate_code(self, value):
        value = value.strip().lower()
        queryset = PriceLevel.objects.filter(code=value)
        if self.instance is not None:
            queryset = queryset.exclude(pk=self.instance.pk)
        if queryset.exists():
            raise serializers.ValidationError(f'Ya existe un nivel de precio con código: {value}')
        return value

    def to_internal_value(self, data):
        # Column codes are stored lowercase
        if hasattr(data, 'copy'):
            data = data.copy()
            for field in ('price_column', 'reference_column'):
                if isinstance(data.get(field), str):
                    data[field] = data[field].strip().lower() or None
        return super().to_internal_value(data)
