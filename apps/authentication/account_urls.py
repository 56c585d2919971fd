from django.urls import path
from apps.notifications.views import notification_preferences
from . import views

urlpatterns = [
    path('profile/', views.profile, name='account_profile'),
    path('password/', views.change_password, name='account_password'),
    path('api-keys/', views.api_keys, name='api_keys'),
    path('api-keys/<int:pk>/', views.api_key_detail, name='api_key_detail'),
    path('login-history/', views.login_history, name='login_history'),
    path('notifications/', notification_preferences, name='notification_preferences'),
]
