# ===========================================================
# users/urls.py
# ===========================================================

from django.urls import path

from .views import ChangePasswordView, LoginView, MeView, RegisterView

app_name = "users"

# ===========================================================
# ROUTES SUMMARY
# ===========================================================
# 1. /api/auth/register   → Create a student account
# 2. /api/auth/login      → Bearer token (rate-limited, lockout-protected)
# 3. /api/auth/me         → Current account profile
# 4. /api/auth/password   → Change password (re-verifies current one)
# ===========================================================

urlpatterns = [
    path("register", RegisterView.as_view(), name="register"),
    path("login", LoginView.as_view(), name="login"),
    path("me", MeView.as_view(), name="me"),
    path("password", ChangePasswordView.as_view(), name="change_password"),
]
