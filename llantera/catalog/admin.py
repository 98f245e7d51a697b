from django.contrib import admin
from .models import Brand, BrandAlias, TireType, Tire


class BrandAliasInline(admin.TabularInline):
    model = BrandAlias
    extra = 1


@admin.register(Brand)
class BrandAdmin(admin.ModelAdmin):
    list_display = ['name', 'alias_list', 'created_at']
    search_fields = ['name', 'aliases__alias']
    ordering = ['name']
    inlines = [BrandAliasInline]

    def alias_list(self, obj):
        return ', '.join(obj.aliases.values_list('alias', flat=True))
    alias_list.short_description = 'Aliases'


@admin.register(TireType)
class TireTypeAdmin(admin.ModelAdmin):
    list_display = ['name', 'description', 'created_at']
    search_fields = ['name']
    ordering = ['name']


@admin.register(Tire)
class TireAdmin(admin.ModelAdmin):
    list_display = ['sku', 'brand', 'model', 'original_measure', 'tire_type', 'public_price', 'created_at']
    list_filter = ['brand', 'tire_type', 'construction', 'created_at']
    search_fields = ['sku', 'model', 'original_measure', 'description']
    ordering = ['sku']
    readonly_fields = ['created_at', 'updated_at']
