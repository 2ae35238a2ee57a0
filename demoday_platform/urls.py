"""URL configuration for demoday_platform project."""

from allauth.account.views import confirm_login_code, logout
from django.conf import settings
from django.contrib import admin
from django.urls import include, path


urlpatterns = [
    path(settings.ADMIN_URL, admin.site.urls),
    path("accounts/login/code/confirm/", confirm_login_code, name="account_confirm_login_code"),
    path("accounts/logout/", logout, name="account_logout"),
    path("accounts/", include("allauth.urls")),
]
