from django.apps import AppConfig


class CoreConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "core"

    def ready(self) -> None:
        from gnapserver.container import ServiceContainer

        # The signing key is generated here, once per process
        self.services = ServiceContainer.from_settings()
