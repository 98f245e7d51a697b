from django.contrib import admin
from .models import Company, Address, BillingInfo, CustomerRequest


@admin.register(Company)
class CompanyAdmin(admin.ModelAdmin):
    list_display = ['key_name', 'social_reason', 'rfc', 'main_contact', 'created_at']
    search_fields = ['key_name', 'social_reason', 'rfc']
    ordering = ['key_name']


@admin.register(Address)
class AddressAdmin(admin.ModelAdmin):
    list_display = ['user', 'alias', 'street', 'exterior_number', 'city', 'state', 'postal_code', 'is_default']
    list_filter = ['is_default', 'state']
    search_fields = ['user__email', 'street', 'city', 'postal_code']


@admin.register(BillingInfo)
class BillingInfoAdmin(admin.ModelAdmin):
    list_display = ['user', 'rfc', 'razon_social', 'regimen_fiscal', 'uso_cfdi', 'is_default']
    list_filter = ['is_default', 'regimen_fiscal']
    search_fields = ['user__email', 'rfc', 'razon_social']


@admin.register(CustomerRequest)
class CustomerRequestAdmin(admin.ModelAdmin):
    list_display = ['full_name', 'request_type', 'email', 'phone', 'status', 'employee', 'created_at', 'attended_at']
    list_filter = ['status', 'request_type', 'created_at']
    search_fields = ['full_name', 'email', 'phone']
    ordering = ['-created_at']
