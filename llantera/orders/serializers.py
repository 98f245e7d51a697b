from django.core.files.storage import default_storage
from rest_framework import serializers
from .models import Order, OrderItem


class CartItemInputSerializer(serializers.Serializer):
    sku = serializers.CharField(max_length=100)
    quantity = serializers.IntegerField(default=1)


class CartItemUpdateSerializer(serializers.Serializer):
    quantity = serializers.IntegerField()


class OrderItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderItem
        fields = ['id', 'tire_sku', 'tire_measure', 'tire_brand', 'tire_model', 'quantity', 'unit_price', 'subtotal']


class OrderSerializer(serializers.ModelSerializer):
    items = OrderItemSerializer(many=True, read_only=True)
    customer_email = serializers.EmailField(source='user.email', read_only=True)
    customer_name = serializers.CharField(source='user.full_name', read_only=True)
    status_display = serializers.CharField(source='get_status_display', read_only=True)
    has_invoice = serializers.BooleanField(read_only=True)
    invoice_xml_url = serializers.SerializerMethodField()
    invoice_pdf_url = serializers.SerializerMethodField()

    class Meta:
        model = Order
        fields = [
            'id', 'order_number', 'user', 'customer_email', 'customer_name', 'status', 'status_display',
            'payment_method', 'payment_mode', 'payment_installments', 'payment_notes',
            'shipping_street', 'shipping_exterior_number', 'shipping_interior_number',
            'shipping_neighborhood', 'shipping_postal_code', 'shipping_city', 'shipping_state',
            'shipping_reference', 'shipping_phone',
            'requires_invoice', 'billing_rfc', 'billing_razon_social', 'billing_regimen_fiscal',
            'billing_uso_cfdi', 'billing_postal_code', 'billing_email',
            'subtotal', 'iva', 'shipping_cost', 'total',
            'has_invoice', 'invoice_xml_path', 'invoice_pdf_path', 'invoice_xml_url', 'invoice_pdf_url',
            'customer_notes', 'admin_notes', 'items',
            'created_at', 'updated_at', 'shipped_at', 'delivered_at', 'cancelled_at',
        ]
        read_only_fields = fields

    def get_invoice_xml_url(self, obj):
        return default_storage.url(obj.invoice_xml_path) if obj.invoice_xml_path else None

    def get_invoice_pdf_url(self, obj):
        return default_storage.url(obj.invoice_pdf_path) if obj.invoice_pdf_path else None


class OrderListSerializer(serializers.ModelSerializer):
    """Lighter representation for order listings"""
    customer_email = serializers.EmailField(source='user.email', read_only=True)
    customer_name = serializers.CharField(source='user.full_name', read_only=True)
    item_count = serializers.SerializerMethodField()
    has_invoice = serializers.BooleanField(read_only=True)

    class Meta:
        model = Order
        fields = [
            'id', 'order_number', 'customer_email', 'customer_name', 'status', 'payment_method',
            'payment_mode', 'requires_invoice', 'has_invoice', 'subtotal', 'iva', 'total',
            'item_count', 'created_at',
        ]

    def get_item_count(self, obj):
        return sum(item.quantity for item in obj.items.all())


class OrderItemInputSerializer(serializers.Serializer):
    sku = serializers.CharField(max_length=100)
    quantity = serializers.IntegerField(min_value=1)
    unit_price = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True, min_value=0)
    tire_measure = serializers.CharField(max_length=255, required=False, allow_blank=True)
    tire_brand = serializers.CharField(max_length=200, required=False, allow_blank=True)
    tire_model = serializers.CharField(max_length=200, required=False, allow_blank=True)


class ShippingAddressInputSerializer(serializers.Serializer):
    street = serializers.CharField(max_length=255)
    exterior_number = serializers.CharField(max_length=50)
    interior_number = serializers.CharField(max_length=50, required=False, allow_blank=True)
    neighborhood = serializers.CharField(max_length=150)
    postal_code = serializers.CharField(max_length=5, min_length=5)
    city = serializers.CharField(max_length=150)
    state = serializers.CharField(max_length=150)
    reference = serializers.CharField(required=False, allow_blank=True)
    phone = serializers.CharField(max_length=20, required=False, allow_blank=True)


class BillingInputSerializer(serializers.Serializer):
    rfc = serializers.CharField(max_length=13, required=False, allow_blank=True)
    razon_social = serializers.CharField(max_length=255, required=False, allow_blank=True)
    regimen_fiscal = serializers.CharField(max_length=10, required=False, allow_blank=True)
    uso_cfdi = serializers.CharField(max_length=10, required=False, allow_blank=True)
    postal_code = serializers.CharField(max_length=5, required=False, allow_blank=True)
    email = serializers.EmailField(required=False, allow_blank=True)


class OrderCreateSerializer(serializers.Serializer):
    items = OrderItemInputSerializer(many=True, allow_empty=False)
    payment_method = serializers.CharField(max_length=20)
    payment_mode = serializers.CharField(max_length=20, required=False, allow_blank=True)
    payment_installments = serializers.IntegerField(required=False, allow_null=True, min_value=1)
    payment_notes = serializers.CharField(required=False, allow_blank=True)
    requires_invoice = serializers.BooleanField(default=False)
    address_id = serializers.IntegerField(required=False, allow_null=True)
    shipping_address = ShippingAddressInputSerializer(required=False, allow_null=True)
    billing_info_id = serializers.IntegerField(required=False, allow_null=True)
    billing_info = BillingInputSerializer(required=False, allow_null=True)
    subtotal = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)
    iva = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)
    total = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)
    customer_notes = serializers.CharField(required=False, allow_blank=True)


class OrderStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[choice for choice, _ in Order.STATUS_CHOICES])
    admin_notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)
