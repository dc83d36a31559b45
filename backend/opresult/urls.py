"""Root URL configuration for opresult project."""
from django.urls import include, path

urlpatterns = [
    path('', include('api.urls')),
]
