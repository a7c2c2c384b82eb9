from django.apps import AppConfig


class CitelinkerConfig(AppConfig):
    """Configuration for the citelinker Django app."""

    name = 'citelinker'
    verbose_name = 'Citation link finder'
