from django.urls import path

from . import views

app_name = "webhooks"

urlpatterns = [
    path("health/", views.health_check, name="health_check"),
    path("gitlab/", views.gitlab_webhook, name="gitlab_webhook"),
]
