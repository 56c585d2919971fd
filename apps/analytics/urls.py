from django.urls import path
from . import views

admin_urlpatterns = [
    path('revenue/', views.RevenueView.as_view(), name='admin_revenue'),
    path('revenue/export/', views.RevenueExportView.as_view(), name='admin_revenue_export'),
    path('ai-insights/', views.AIInsightsView.as_view(), name='admin_ai_insights'),
    path('dashboard/', views.DashboardView.as_view(), name='admin_dashboard'),
]
