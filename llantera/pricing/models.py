from django.db import models
from decimal import Decimal


class PriceColumn(models.Model):
    """
    A named price list. Fixed columns hold prices entered per tire;
    derived columns are computed from a base column with an operation.
    """
    MODE_CHOICES = [
        ('fixed', 'Fijo'),
        ('derived', 'Derivado'),
    ]

    OPERATION_CHOICES = [
        ('add', 'Sumar'),
        ('subtract', 'Restar'),
        ('multiply', 'Multiplicar'),
        ('percent', 'Porcentaje de descuento'),
    ]

    code = models.CharField(max_length=50, unique=True)
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    display_order = models.PositiveIntegerField(default=0)
    is_active = models.BooleanField(default=True)
    is_public = models.BooleanField(default=False)
    mode = models.CharField(max_length=20, choices=MODE_CHOICES, default='fixed')
    base = models.ForeignKey('self', on_delete=models.PROTECT, null=True, blank=True, related_name='derived_columns')
    operation = models.CharField(max_length=20, choices=OPERATION_CHOICES, default='percent')
    amount = models.DecimalField(max_digits=10, decimal_places=4, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    @property
    def is_derived(self):
        return self.mode == 'derived'

    def __str__(self):
        return f"{self.name} ({self.code})"

    class Meta:
        db_table = 'price_columns'
        ordering = ['display_order', 'code']


class PriceLevel(models.Model):
    """Customer price level: which column a customer buys at and which one is shown as reference"""
    code = models.CharField(max_length=50, unique=True)
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    discount_percentage = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal('0.00'))
    price_column = models.ForeignKey(PriceColumn, on_delete=models.PROTECT, related_name='levels')
    reference_column = models.ForeignKey(PriceColumn, on_delete=models.SET_NULL, null=True, blank=True, related_name='reference_levels')
    can_view_offers = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.name} ({self.code})"

    class Meta:
        db_table = 'price_levels'
        ordering = ['code']


class TirePrice(models.Model):
    """Price of a tire in one price column"""
    tire = models.ForeignKey('catalog.Tire', on_delete=models.CASCADE, related_name='prices')
    column = models.ForeignKey(PriceColumn, on_delete=models.CASCADE, related_name='prices')
    price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.tire_id} @ {self.column_id}: {self.price}"

    class Meta:
        db_table = 'tire_prices'
        unique_together = [['tire', 'column']]
        indexes = [
            models.Index(fields=['column', 'tire'], name='idx_tire_price_column'),
        ]
