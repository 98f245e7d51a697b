from django.contrib import admin
from .models import Inventory


@admin.register(Inventory)
class InventoryAdmin(admin.ModelAdmin):
    list_display = ['tire', 'quantity', 'reserved', 'min_stock', 'updated_at']
    list_filter = ['updated_at']
    search_fields = ['tire__sku', 'tire__model']
    ordering = ['tire__sku']
    readonly_fields = ['created_at', 'updated_at']
