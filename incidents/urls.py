from django.urls import path

from . import views

urlpatterns = [
    path('', views.incident_dashboard, name='incident_dashboard'),
    path('report/', views.incident_report, name='incident_report'),
    path('search/', views.incident_search, name='incident_search'),
    path('statistics/', views.incident_statistics, name='incident_statistics'),
    path('<int:pk>/', views.incident_detail, name='incident_detail'),
    path('<int:pk>/edit/', views.incident_edit, name='incident_edit'),
    path('<int:pk>/status/', views.incident_update_status, name='incident_update_status'),
    path('<int:pk>/verify/', views.incident_verify, name='incident_verify'),
    path('<int:pk>/priority/', views.incident_set_priority, name='incident_set_priority'),
    path('<int:pk>/assign/', views.incident_assign, name='incident_assign'),
    path('<int:pk>/updates/', views.incident_add_update, name='incident_add_update'),
    path('<int:pk>/resources/', views.incident_add_resource, name='incident_add_resource'),
    path('<int:pk>/responses/', views.incident_add_response, name='incident_add_response'),
    path('<int:pk>/media/', views.incident_add_media, name='incident_add_media'),
    path('<int:pk>/delete/', views.incident_delete, name='incident_delete'),
    path('<int:pk>/export/', views.incident_export, name='incident_export'),
    path('<str:kind>/<int:child_pk>/remove/', views.incident_delete_child, name='incident_delete_child'),
]
