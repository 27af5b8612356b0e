from django.urls import path

from . import views

urlpatterns = [
    path('', views.volunteer_dashboard, name='volunteer_dashboard'),
    path('register/', views.volunteer_register, name='volunteer_register'),
    path('profile/', views.volunteer_profile, name='volunteer_profile'),
    path('availability/', views.volunteer_availability, name='volunteer_availability'),
    path('tasks/', views.task_list, name='volunteer_task_list'),
    path('tasks/new/', views.task_create, name='volunteer_task_create'),
    path('tasks/<int:pk>/', views.task_detail, name='volunteer_task_detail'),
    path('tasks/<int:pk>/edit/', views.task_edit, name='volunteer_task_edit'),
    path('tasks/<int:pk>/apply/', views.task_apply, name='volunteer_task_apply'),
    path('my-tasks/', views.my_tasks, name='volunteer_my_tasks'),
    path('assignments/<int:pk>/accept/', views.assignment_accept, name='volunteer_assignment_accept'),
    path('assignments/<int:pk>/decline/', views.assignment_decline, name='volunteer_assignment_decline'),
    path('assignments/<int:pk>/start/', views.assignment_start, name='volunteer_assignment_start'),
    path('assignments/<int:pk>/cancel/', views.assignment_cancel, name='volunteer_assignment_cancel'),
    path('assignments/<int:pk>/complete/', views.assignment_complete, name='volunteer_assignment_complete'),
    path('assignments/<int:pk>/rate/', views.assignment_rate, name='volunteer_assignment_rate'),
    path('messages/', views.volunteer_messages, name='volunteer_messages'),
    path('messages/<int:pk>/read/', views.message_mark_read, name='volunteer_message_read'),
    path('directory/', views.volunteer_directory, name='volunteer_directory'),
    path('statistics/', views.volunteer_statistics, name='volunteer_statistics'),
]
