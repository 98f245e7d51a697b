"""
URL configuration for the llantera project.

Every app publishes its endpoints under ``api/v1/``.
"""
from django.contrib import admin
from django.urls import path, include, re_path
from django.conf import settings
from django.views.static import serve

admin.site.site_header = "Llantera Admin Panel"
admin.site.site_title = "Llantera Admin Portal"
admin.site.index_title = "Catálogo, precios y pedidos"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/', include('llantera.core.urls')),
    path('api/v1/', include('llantera.parties.urls')),
    path('api/v1/', include('llantera.catalog.urls')),
    path('api/v1/', include('llantera.inventory.urls')),
    path('api/v1/', include('llantera.pricing.urls')),
    path('api/v1/', include('llantera.orders.urls')),
    path('api/v1/', include('llantera.notifications.urls')),
    path('api/v1/', include('llantera.reports.urls')),
    re_path(r'^media/(?P<path>.*)$', serve, {'document_root': settings.MEDIA_ROOT}),
]
