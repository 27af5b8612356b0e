from django.urls import path
from . import views

urlpatterns = [
    path('', views.home, name='home'),
    path('dashboard/', views.dashboard, name='dashboard'),
    path('statistics/export/<str:report_type>/', views.statistics_export, name='statistics_export'),
]
