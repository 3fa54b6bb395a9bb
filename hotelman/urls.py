from django.urls import path

from .views import LoyaltyView

app_name = "hotelman"

urlpatterns = [
    path("", LoyaltyView.as_view(), name="loyalty"),
    path("<str:guest_code>/", LoyaltyView.as_view(), name="loyalty-member"),
]
