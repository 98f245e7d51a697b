from rest_framework import serializers
from .models import Brand, TireType, Tire


class BrandSerializer(serializers.ModelSerializer):
    aliases = serializers.ListField(
        child=serializers.CharField(max_length=100, allow_blank=True), required=False, write_only=True
    )
    tires_count = serializers.IntegerField(source='tires.count', read_only=True)

    class Meta:
        model = Brand
        fields = ['id', 'name', 'aliases', 'tires_count', 'created_at', 'updated_at']

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError('El nombre de la marca es obligatorio')
        queryset = Brand.objects.filter(name__iexact=value)
        if self.instance is not None:
            queryset = queryset.exclude(pk=self.instance.pk)
        if queryset.exists():
            raise serializers.ValidationError('Ya existe una marca con ese nombre')
        return value

    def to_representation(self, instance):
        data = super().to_representation(instance)
        data['aliases'] = sorted(instance.aliases.values_list('alias', flat=True))
        return data

    def create(self, validated_data):
        from .services import set_brand_aliases
        aliases = validated_data.pop('aliases', [])
        brand = Brand.objects.create(**validated_data)
        set_brand_aliases(brand, aliases)
        return brand

    def update(self, instance, validated_data):
        from .services import set_brand_aliases
        aliases = validated_data.pop('aliases', None)
        instance = super().update(instance, validated_data)
        if aliases is not None:
            set_brand_aliases(instance, aliases)
        return instance


class TireTypeSerializer(serializers.ModelSerializer):
    class Meta:
        model = TireType
        fields = ['id', 'name', 'description', 'created_at', 'updated_at']

    def validate_name(self, value):
        value = value.strip()
        queryset = TireType.objects.filter(name__iexact=value)
        if self.instance is not None:
            queryset = queryset.exclude(pk=self.instance.pk)
        if queryset.exists():
            raise serializers.ValidationError('Ya existe un tipo con ese nombre')
        return value


class TireSerializer(serializers.ModelSerializer):
    brand_name = serializers.CharField(source='brand.name', read_only=True)
    tire_type_name = serializers.CharField(source='tire_type.name', read_only=True, default=None)

    class Meta:
        model = Tire
        fields = [
            'id', 'sku', 'brand', 'brand_name', 'model', 'width', 'profile', 'rim', 'construction',
            'tube_type', 'ply_rating', 'load_index', 'speed_index', 'tire_type', 'tire_type_name',
            'usage_code', 'description', 'public_price', 'image_url', 'original_measure',
            'created_at', 'updated_at'
        ]
        read_only_fields = fields


class TireWriteSerializer(serializers.Serializer):
    """Input for creating or updating a tire; brand and type are given by name"""
    sku = serializers.CharField(max_length=100)
    brand_name = serializers.CharField(max_length=200, required=False, allow_blank=True)
    brand_alias = serializers.CharField(max_length=100, required=False, allow_blank=True)
    model = serializers.CharField(max_length=200, required=False, allow_blank=True)
    width = serializers.IntegerField(required=False, min_value=0)
    profile = serializers.IntegerField(required=False, allow_null=True, min_value=0)
    rim = serializers.DecimalField(max_digits=5, decimal_places=1, required=False, min_value=0)
    construction = serializers.ChoiceField(choices=['R', 'D', 'r', 'd', ''], required=False, allow_blank=True)
    tube_type = serializers.CharField(max_length=10, required=False, allow_blank=True)
    ply_rating = serializers.CharField(max_length=10, required=False, allow_blank=True)
    load_index = serializers.CharField(max_length=10, required=False, allow_blank=True)
    speed_index = serializers.CharField(max_length=5, required=False, allow_blank=True)
    tire_type_name = serializers.CharField(max_length=100, required=False, allow_blank=True)
    usage_code = serializers.CharField(max_length=20, required=False, allow_blank=True)
    description = serializers.CharField(required=False, allow_blank=True)
    public_price = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, min_value=0)
    image_url = serializers.CharField(max_length=500, required=False, allow_blank=True)
    original_measure = serializers.CharField(max_length=255, required=False, allow_blank=True)

    def validate_sku(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError('El SKU es obligatorio')
        return value


class AdminTireUpdateSerializer(serializers.Serializer):
    quantity = serializers.IntegerField(required=False, allow_null=True, min_value=0)
    prices = serializers.DictField(
        child=serializers.DecimalField(max_digits=12, decimal_places=2, allow_null=True, min_value=0),
        required=False
    )


class TireImportSerializer(serializers.Serializer):
    file = serializers.FileField()

    def validate_file(self, value):
        if not value.name.lower().endswith('.csv'):
            raise serializers.ValidationError('El archivo debe ser CSV')
        return value
