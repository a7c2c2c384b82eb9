"""URL configuration for the citelinker app.

This module defines the URL patterns for the JSON API. It also
specifies the ``app_name`` to allow namespacing from the project URL
configuration.
"""

from django.urls import path

from . import views

app_name = 'citelinker'

urlpatterns = [
    path('keywords/', views.discover_keywords, name='keywords'),
    path('search/', views.search_phrase, name='search'),
    path('reason/', views.citation_reason, name='reason'),
]
