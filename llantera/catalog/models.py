from django.db import models
from decimal import Decimal


class Brand(models.Model):
    """Tire brands"""
    name = models.CharField(max_length=200, unique=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'brands'
        ordering = ['name']


class BrandAlias(models.Model):
    """Alternative spellings or abbreviations of a brand (e.g. GDY for Goodyear)"""
    brand = models.ForeignKey(Brand, on_delete=models.CASCADE, related_name='aliases')
    alias = models.CharField(max_length=100)
    created_at = models.DateTimeField(auto_now_add=True)

    def save(self, *args, **kwargs):
        self.alias = (self.alias or '').strip().upper()
        super().save(*args, **kwargs)

    def __str__(self):
        return self.alias

    class Meta:
        db_table = 'brand_aliases'
        unique_together = [['brand', 'alias']]


class TireType(models.Model):
    """Normalized usage type (Pasajero, Camioneta, Agrícola...)"""
    name = models.CharField(max_length=100, unique=True)
    description = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'tire_types'
        ordering = ['name']


class Tire(models.Model):
    """Tire master record, keyed by SKU"""
    CONSTRUCTION_CHOICES = [
        ('R', 'Radial'),
        ('D', 'Diagonal'),
    ]

    sku = models.CharField(max_length=100, unique=True, db_index=True)
    brand = models.ForeignKey(Brand, on_delete=models.PROTECT, related_name='tires')
    model = models.CharField(max_length=200, blank=True)
    width = models.PositiveIntegerField(default=0)
    profile = models.PositiveIntegerField(null=True, blank=True)
    rim = models.DecimalField(max_digits=5, decimal_places=1, default=Decimal('0.0'))
    construction = models.CharField(max_length=1, choices=CONSTRUCTION_CHOICES, blank=True)
    tube_type = models.CharField(max_length=10, blank=True)
    ply_rating = models.CharField(max_length=10, blank=True)
    load_index = models.CharField(max_length=10, blank=True)
    speed_index = models.CharField(max_length=5, blank=True)
    tire_type = models.ForeignKey(TireType, on_delete=models.SET_NULL, null=True, blank=True, related_name='tires')
    usage_code = models.CharField(max_length=20, blank=True)
    description = models.TextField(blank=True)
    public_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    image_url = models.CharField(max_length=500, blank=True)
    original_measure = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.sku} {self.original_measure}".strip()

    class Meta:
        db_table = 'tires'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['brand'], name='idx_tire_brand'),
            models.Index(fields=['width', 'profile', 'rim'], name='idx_tire_measure'),
        ]
