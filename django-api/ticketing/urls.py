from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/", include("currency.urls")),
    path("api/", include("promotions.urls")),
]
