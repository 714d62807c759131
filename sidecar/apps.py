from django.apps import AppConfig


class SidecarConfig(AppConfig):
    name = 'sidecar'
    verbose_name = 'Sidecar supervision'
    default_auto_field = 'django.db.models.BigAutoField'
