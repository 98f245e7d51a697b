from django.urls import path
from .views import (
    price_column_list_create, price_column_detail, price_column_dependents,
    price_level_list_create, price_level_detail,
)

urlpatterns = [
    # PriceColumn endpoints
    path('price-columns/', price_column_list_create, name='price-column-list-create'),
    path('price-columns/<int:pk>/', price_column_detail, name='price-column-detail'),
    path('price-columns/<int:pk>/dependents/', price_column_dependents, name='price-column-dependents'),

    # PriceLevel endpoints
    path('price-levels/', price_level_list_create, name='price-level-list-create'),
    path('price-levels/<int:pk>/', price_level_detail, name='price-level-detail'),
]
