from rest_framework import serializers
from .models import Inventory


class InventorySerializer(serializers.ModelSerializer):
    sku = serializers.CharField(source='tire.sku', read_only=True)
    brand_name = serializers.CharField(source='tire.brand.name', read_only=True)
    model = serializers.CharField(source='tire.model', read_only=True)
    measure = serializers.CharField(source='tire.original_measure', read_only=True)
    is_low_stock = serializers.BooleanField(read_only=True)

    class Meta:
        model = Inventory
        fields = ['id', 'sku', 'brand_name', 'model', 'measure', 'quantity', 'reserved', 'min_stock',
                  'is_low_stock', 'updated_at']


class InventoryUpdateSerializer(serializers.Serializer):
    quantity = serializers.IntegerField(required=False, min_value=0)
    min_stock = serializers.IntegerField(required=False, min_value=0)
