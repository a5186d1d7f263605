from django.apps import AppConfig


class GradingAppConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'grading_app'
    verbose_name = 'CBC grading'
