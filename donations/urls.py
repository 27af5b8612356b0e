from django.urls import path

from . import views

urlpatterns = [
    path('', views.donation_dashboard, name='donation_dashboard'),
    path('donate/', views.donate, name='donate'),
    path('search/', views.donation_search, name='donation_search'),
    path('resources/', views.resource_list, name='resource_list'),
    path('resources/<int:pk>/quality-check/', views.resource_quality_check, name='resource_quality_check'),
    path('statistics/', views.donation_statistics, name='donation_statistics'),
    path('centers/', views.center_list, name='donation_center_list'),
    path('centers/new/', views.center_edit, name='donation_center_create'),
    path('centers/<int:pk>/edit/', views.center_edit, name='donation_center_edit'),
    path('<int:pk>/', views.donation_detail, name='donation_detail'),
    path('<int:pk>/status/', views.donation_update_status, name='donation_update_status'),
    path('<int:pk>/tracking/', views.donation_add_tracking, name='donation_add_tracking'),
    path('<int:pk>/resources/', views.donation_add_resource, name='donation_add_resource'),
    path('<int:pk>/distribute/', views.donation_distribute, name='donation_distribute'),
    path('<int:pk>/receipt/', views.tax_receipt, name='donation_tax_receipt'),
    path('<int:pk>/delete/', views.donation_delete, name='donation_delete'),
]
