from django.apps import AppConfig


class HotelmanConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "hotelman"
    verbose_name = "Hotelman - Guest Loyalty"
