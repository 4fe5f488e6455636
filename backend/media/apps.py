from django.apps import AppConfig


class MediaAppConfig(AppConfig):
    name = 'media'
    verbose_name = 'Media server'

    def ready(self):
        # connects the setting_changed receiver that resets the cached media config
        from . import config  # noqa: F401
