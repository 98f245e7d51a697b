from django.contrib import admin
from .models import PriceColumn, PriceLevel, TirePrice


@admin.register(PriceColumn)
class PriceColumnAdmin(admin.ModelAdmin):
    list_display = ['code', 'name', 'mode', 'base', 'operation', 'amount', 'display_order', 'is_active', 'is_public']
    list_filter = ['mode', 'is_active', 'is_public']
    search_fields = ['code', 'name']
    ordering = ['display_order', 'code']


@admin.register(PriceLevel)
class PriceLevelAdmin(admin.ModelAdmin):
    list_display = ['code', 'name', 'price_column', 'reference_column', 'discount_percentage', 'can_view_offers']
    search_fields = ['code', 'name']


@admin.register(TirePrice)
class TirePriceAdmin(admin.ModelAdmin):
    list_display = ['tire', 'column', 'price', 'updated_at']
    list_filter = ['column']
    search_fields = ['tire__sku']
