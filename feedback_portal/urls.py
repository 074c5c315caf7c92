from django.contrib import admin
from django.urls import path, include, re_path
from drf_yasg.views import get_schema_view
from drf_yasg import openapi
from rest_framework import permissions
from django.conf import settings

from .views import HealthView

# Swagger schema setup
schema_view = get_schema_view(
    openapi.Info(
        title="Student Feedback API",
        default_version=settings.VERSION,
        description="Student feedback intake and triage API documentation",
    ),
    public=True,
    permission_classes=(permissions.AllowAny,),
    authentication_classes=(),
)

urlpatterns = [
    # Admin panel
    path('admin/', admin.site.urls),

    # API modules
    path('api/auth/', include('users.urls')),
    path('api/', include('feedback.urls')),
    path('api/health', HealthView.as_view(), name='health'),

    # Swagger and Redoc routes
    re_path(r'^swagger(?P<format>\.json|\.yaml)$', schema_view.without_ui(cache_timeout=0), name='schema-json'),
    path('swagger/', schema_view.with_ui('swagger', cache_timeout=0), name='schema-swagger-ui'),
    path('redoc/', schema_view.with_ui('redoc', cache_timeout=0), name='schema-redoc'),
]

handler404 = 'feedback_portal.views.not_found'
handler500 = 'feedback_portal.views.server_error'
