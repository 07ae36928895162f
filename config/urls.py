from django.contrib import admin
from django.urls import path, include
from drf_yasg import openapi
from drf_yasg.views import get_schema_view
from rest_framework import permissions

schema_view = get_schema_view(
    openapi.Info(title="Recurring Contributions API", default_version="v1"),
    public=True,
    permission_classes=[permissions.AllowAny],
)

urlpatterns = [
    path('admin/', admin.site.urls),

    # Authentification et comptes
    path("api/auth/", include(("accounts.urls", "accounts"), namespace="accounts")),

    # Contributions récurrentes
    path("api/", include("orders.urls")),

    # Moyens de paiement
    path("api/", include("payment_methods.urls")),

    # Documentation
    path("api/docs/", schema_view.with_ui("swagger", cache_timeout=0), name="api-docs"),
]
