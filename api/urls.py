from django.urls import path
from . import views

urlpatterns = [
    # Health check
    path("health", views.health, name="health"),

    # Users. Literal paths come before "users/<id>" so they are not taken as ids
    path("users", views.users_collection, name="users"),
    path("users/me", views.users_me, name="users_me"),
    path("users/login", views.users_login, name="users_login"),
    path("users/register", views.users_register, name="users_register"),
    path("users/social", views.users_social, name="users_social"),
    path("users/password-reset", views.users_password_reset, name="users_password_reset"),
    path("users/<str:doc_id>", views.user_detail, name="user_detail"),

    # Meetings and participants (authenticated)
    path("meetings", views.meetings_collection, name="meetings"),
    path("meetings/<str:doc_id>", views.meeting_detail, name="meeting_detail"),
    path("participants", views.participants_collection, name="participants"),
    path("participants/<str:doc_id>", views.participant_detail, name="participant_detail"),
]
