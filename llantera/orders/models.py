from django.db import models
from django.conf import settings
from decimal import Decimal


class Cart(models.Model):
    """Shopping cart, one per user"""
    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='cart')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Cart {self.user_id}"

    class Meta:
        db_table = 'carts'


class CartItem(models.Model):
    """Cart items reference tires by SKU"""
    cart = models.ForeignKey(Cart, on_delete=models.CASCADE, related_name='items')
    tire_sku = models.CharField(max_length=100)
    quantity = models.PositiveIntegerField(default=1)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'cart_items'
        ordering = ['id']
        unique_together = [['cart', 'tire_sku']]


class Order(models.Model):
    """Customer orders"""
    STATUS_CHOICES = [
        ('solicitado', 'Solicitado'),
        ('preparando', 'Preparando'),
        ('enviado', 'Enviado'),
        ('entregado', 'Entregado'),
        ('cancelado', 'Cancelado'),
    ]

    PAYMENT_METHOD_CHOICES = [
        ('transferencia', 'Transferencia'),
        ('tarjeta', 'Tarjeta'),
        ('efectivo', 'Efectivo'),
    ]

    PAYMENT_MODE_CHOICES = [
        ('contado', 'Contado'),
        ('credito', 'Crédito'),
        ('parcialidades', 'Parcialidades'),
        ('anticipo', 'Anticipo'),
    ]

    order_number = models.CharField(max_length=100, unique=True)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name='orders')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='solicitado', db_index=True)
    payment_method = models.CharField(max_length=20, choices=PAYMENT_METHOD_CHOICES)
    payment_mode = models.CharField(max_length=20, choices=PAYMENT_MODE_CHOICES, default='contado')
    payment_installments = models.PositiveIntegerField(null=True, blank=True)
    payment_notes = models.TextField(blank=True)

    # Shipping address snapshot
    shipping_street = models.CharField(max_length=255, blank=True)
    shipping_exterior_number = models.CharField(max_length=50, blank=True)
    shipping_interior_number = models.CharField(max_length=50, blank=True)
    shipping_neighborhood = models.CharField(max_length=150, blank=True)
    shipping_postal_code = models.CharField(max_length=5, blank=True)
    shipping_city = models.CharField(max_length=150, blank=True)
    shipping_state = models.CharField(max_length=150, blank=True)
    shipping_reference = models.TextField(blank=True)
    shipping_phone = models.CharField(max_length=20, blank=True)

    # Billing snapshot
    requires_invoice = models.BooleanField(default=False)
    billing_rfc = models.CharField(max_length=13, blank=True)
    billing_razon_social = models.CharField(max_length=255, blank=True)
    billing_regimen_fiscal = models.CharField(max_length=10, blank=True)
    billing_uso_cfdi = models.CharField(max_length=10, blank=True)
    billing_postal_code = models.CharField(max_length=5, blank=True)
    billing_email = models.EmailField(blank=True)

    subtotal = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    iva = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    shipping_cost = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    total = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))

    invoice_xml_path = models.CharField(max_length=500, blank=True)
    invoice_pdf_path = models.CharField(max_length=500, blank=True)
    customer_notes = models.TextField(blank=True)
    admin_notes = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    shipped_at = models.DateTimeField(null=True, blank=True)
    delivered_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)

    @property
    def has_invoice(self):
        return bool(self.invoice_xml_path or self.invoice_pdf_path)

    def __str__(self):
        return self.order_number

    class Meta:
        db_table = 'orders'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['user', '-created_at'], name='idx_order_user_created'),
        ]


class OrderItem(models.Model):
    """Order lines keep a snapshot of the tire at purchase time"""
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name='items')
    tire_sku = models.CharField(max_length=100)
    tire_measure = models.CharField(max_length=255, blank=True)
    tire_brand = models.CharField(max_length=200, blank=True)
    tire_model = models.CharField(max_length=200, blank=True)
    quantity = models.PositiveIntegerField()
    unit_price = models.DecimalField(max_digits=12, decimal_places=2)
    subtotal = models.DecimalField(max_digits=12, decimal_places=2)

    def __str__(self):
        return f"{self.order.order_number} - {self.tire_sku} x{self.quantity}"

    class Meta:
        db_table = 'order_items'
        ordering = ['id']
