"""
URL configuration for django_gitnotify project.

The `urlpatterns` list routes URLs to views. For more information please see:
    https://docs.djangoproject.com/en/5.1/topics/http/urls/
"""

from django.urls import include, path

urlpatterns = [
    path("webhooks/", include("webhooks.urls")),
]
