from django.apps import AppConfig


class CarbonConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'carbon'
    verbose_name = 'Carbon credits'

    def ready(self):
        # Connect the activity aggregation trigger
        from . import signals  # noqa: F401
