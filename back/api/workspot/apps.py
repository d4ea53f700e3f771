from django.apps import AppConfig


class WorkspotConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "workspot"
    verbose_name = "WorkSpot"
