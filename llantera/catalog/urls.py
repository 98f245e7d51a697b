from django.urls import path
from .views import (
    brand_list_create, brand_detail, tire_type_list_create,
    tire_list_create, tire_detail,
    catalog_tire_list, catalog_tire_detail,
    tire_admin_list, tire_admin_detail, tire_admin_export, tire_admin_import
)

urlpatterns = [
    # Brand endpoints
    path('brands/', brand_list_create, name='brand-list-create'),
    path('brands/<int:pk>/', brand_detail, name='brand-detail'),

    # TireType endpoints
    path('tire-types/', tire_type_list_create, name='tire-type-list-create'),

    # Admin catalog endpoints (before tires/<sku>/)
    path('tires/admin/', tire_admin_list, name='tire-admin-list'),
    path('tires/admin/export/', tire_admin_export, name='tire-admin-export'),
    path('tires/admin/import/', tire_admin_import, name='tire-admin-import'),
    path('tires/admin/<str:sku>/', tire_admin_detail, name='tire-admin-detail'),

    # Tire endpoints
    path('tires/', tire_list_create, name='tire-list-create'),
    path('tires/<str:sku>/', tire_detail, name='tire-detail'),

    # Public catalog endpoints
    path('catalog/tires/', catalog_tire_list, name='catalog-tire-list'),
    path('catalog/tires/<str:sku>/', catalog_tire_detail, name='catalog-tire-detail'),
]
