from django.db import models


class Inventory(models.Model):
    """Stock of one tire. ``quantity`` is what is available for sale"""
    tire = models.OneToOneField('catalog.Tire', on_delete=models.CASCADE, related_name='inventory')
    quantity = models.IntegerField(default=0)
    reserved = models.IntegerField(default=0)
    min_stock = models.IntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    @property
    def is_low_stock(self):
        return self.quantity <= self.min_stock

    def __str__(self):
        return f"{self.tire.sku}: {self.quantity} ({self.reserved} reservado)"

    class Meta:
        db_table = 'inventory'
        verbose_name_plural = 'inventory'
