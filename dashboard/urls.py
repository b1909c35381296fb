"""URL configuration for the dashboard app."""
from django.urls import path

from . import views

app_name = "dashboard"

urlpatterns = [
    path("", views.home, name="home"),
    path("login/", views.login_view, name="login"),
    path("logout/", views.logout_view, name="logout"),
    path("unauthorized/", views.unauthorized, name="unauthorized"),
    path("scholarships/relay/", views.scholarship_relay, name="scholarship-relay"),
    path("<slug:entity>/", views.record_list, name="record-list"),
    path("<slug:entity>/new/", views.record_create, name="record-create"),
    path("<slug:entity>/<str:pk>/", views.record_detail, name="record-detail"),
    path("<slug:entity>/<str:pk>/edit/", views.record_update, name="record-update"),
    path("<slug:entity>/<str:pk>/delete/", views.record_delete, name="record-delete"),
    path("<slug:entity>/<str:pk>/highlight/", views.record_highlight, name="record-highlight"),
]
