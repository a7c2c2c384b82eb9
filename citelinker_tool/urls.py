"""Root URL configuration for citelinker_tool."""

from django.urls import include, path

urlpatterns = [
    path('api/', include('citelinker.urls')),
]
