import django_filters
from django.db.models import Q
from .models import Tire


class TireFilter(django_filters.FilterSet):
    """Catalog filters shared by the public catalog, the admin listing and the export"""

    # Basic search - searches across sku, model, description and the original measure
    search = django_filters.CharFilter(method='filter_search', label='Search')

    # Direct field filters
    brand_id = django_filters.NumberFilter(field_name='brand_id', lookup_expr='exact')
    type_id = django_filters.NumberFilter(field_name='tire_type_id', lookup_expr='exact')
    usage_code = django_filters.CharFilter(field_name='usage_code', lookup_expr='iexact')
    width = django_filters.NumberFilter(field_name='width', lookup_expr='exact')
    profile = django_filters.NumberFilter(field_name='profile', lookup_expr='exact')
    rim = django_filters.NumberFilter(field_name='rim', lookup_expr='exact')
    construction = django_filters.CharFilter(field_name='construction', lookup_expr='iexact')
    ply_rating = django_filters.CharFilter(field_name='ply_rating', lookup_expr='iexact')
    load_index = django_filters.CharFilter(field_name='load_index', lookup_expr='iexact')
    speed_index = django_filters.CharFilter(field_name='speed_index', lookup_expr='iexact')

    # Stock status filter
    in_stock_only = django_filters.CharFilter(method='filter_in_stock_only', label='In Stock Only')

    class Meta:
        model = Tire
        fields = ['search', 'brand_id', 'type_id', 'usage_code', 'width', 'profile', 'rim',
                  'construction', 'ply_rating', 'load_index', 'speed_index', 'in_stock_only']

    def filter_search(self, queryset, name, value):
        """Every word must appear in the sku, model, description or measure"""
        if not value or not value.strip():
            return queryset

        for word in value.split():
            queryset = queryset.filter(
                Q(sku__icontains=word) |
                Q(model__icontains=word) |
                Q(description__icontains=word) |
                Q(original_measure__icontains=word)
            )
        return queryset

    def filter_in_stock_only(self, queryset, name, value):
        """Only tires with stock on hand"""
        if value is None or value == '':
            return queryset

        # Handle string 'true'/'false'
        if isinstance(value, str):
            should_filter = value.lower() in ('true', '1', 'yes')
        else:
            should_filter = bool(value)

        if should_filter:
            return queryset.filter(inventory__quantity__gt=0)
        return queryset
