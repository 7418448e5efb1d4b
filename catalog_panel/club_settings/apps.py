from django.apps import AppConfig


class ClubSettingsConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'club_settings'
    verbose_name = 'Настройки клуба'
