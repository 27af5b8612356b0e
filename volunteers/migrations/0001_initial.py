# Generated migration for the volunteer registry

from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone

from volunteers.models import (
    VolunteerAvailability,
    VolunteerCommunication,
    VolunteerProfile,
    VolunteerTask,
    VolunteerTaskAssignment,
)


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='VolunteerProfile',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('phone_number', models.CharField(max_length=30)),
                ('emergency_contact', models.CharField(blank=True, max_length=100)),
                ('emergency_contact_phone', models.CharField(blank=True, max_length=30)),
                ('skills', models.TextField(blank=True, help_text='Comma-separated list of skills')),
                ('availability', models.TextField(blank=True, help_text="Free-text availability, e.g. 'Weekends'")),
                ('has_transportation', models.BooleanField(default=False)),
                ('has_medical_training', models.BooleanField(default=False)),
                ('languages', models.CharField(blank=True, max_length=200)),
                ('previous_experience', models.TextField(blank=True)),
                ('background_check_status', models.CharField(choices=VolunteerProfile.BACKGROUND_CHECK_CHOICES, default='pending', max_length=20)),
                ('registration_date', models.DateTimeField(default=django.utils.timezone.now)),
                ('status', models.CharField(choices=VolunteerProfile.STATUS_CHOICES, default='active', max_length=20)),
                ('user', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='volunteer_profile', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Volunteer Profile',
                'verbose_name_plural': 'Volunteer Profiles',
                'ordering': ['user__last_name', 'user__first_name'],
            },
        ),
        migrations.CreateModel(
            name='VolunteerTask',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('title', models.CharField(max_length=200)),
                ('description', models.TextField()),
                ('category', models.CharField(choices=VolunteerTask.CATEGORY_CHOICES, max_length=30)),
                ('priority', models.CharField(choices=VolunteerTask.PRIORITY_CHOICES, default='medium', max_length=20)),
                ('required_skills', models.TextField(blank=True)),
                ('location', models.CharField(max_length=300)),
                ('start_date', models.DateTimeField()),
                ('end_date', models.DateTimeField(blank=True, null=True)),
                ('estimated_hours', models.PositiveIntegerField(default=1)),
                ('max_volunteers', models.PositiveIntegerField(default=1)),
                ('status', models.CharField(choices=VolunteerTask.STATUS_CHOICES, default='open', max_length=20)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('created_by', models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='created_volunteer_tasks', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Volunteer Task',
                'verbose_name_plural': 'Volunteer Tasks',
                'ordering': ['start_date', 'id'],
            },
        ),
        migrations.CreateModel(
            name='VolunteerTaskAssignment',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('assigned_date', models.DateTimeField(default=django.utils.timezone.now)),
                ('status', models.CharField(choices=VolunteerTaskAssignment.STATUS_CHOICES, default='assigned', max_length=20)),
                ('hours_worked', models.DecimalField(decimal_places=2, default=0, max_digits=6)),
                ('notes', models.TextField(blank=True)),
                ('completion_date', models.DateTimeField(blank=True, null=True)),
                ('rating', models.PositiveSmallIntegerField(blank=True, help_text='1-5, set by an admin', null=True)),
                ('feedback', models.TextField(blank=True)),
                ('task', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='assignments', to='volunteers.volunteertask')),
                ('volunteer', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='assignments', to='volunteers.volunteerprofile')),
            ],
            options={
                'ordering': ['-assigned_date', '-id'],
            },
        ),
        migrations.AddConstraint(
            model_name='volunteertaskassignment',
            constraint=models.UniqueConstraint(
                condition=~models.Q(status__in=['declined', 'cancelled']),
                fields=('volunteer', 'task'),
                name='volunteers_one_active_assignment_per_task',
            ),
        ),
        migrations.CreateModel(
            name='VolunteerAvailability',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('day_of_week', models.PositiveSmallIntegerField(choices=VolunteerAvailability.DAY_CHOICES)),
                ('start_time', models.TimeField()),
                ('end_time', models.TimeField()),
                ('is_available', models.BooleanField(default=True)),
                ('volunteer', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='availability_slots', to='volunteers.volunteerprofile')),
            ],
            options={
                'verbose_name_plural': 'Volunteer availability',
                'ordering': ['day_of_week', 'start_time'],
                'unique_together': {('volunteer', 'day_of_week')},
            },
        ),
        migrations.CreateModel(
            name='VolunteerCommunication',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('subject', models.CharField(max_length=200)),
                ('message', models.TextField()),
                ('communication_type', models.CharField(choices=VolunteerCommunication.TYPE_CHOICES, default='general', max_length=20)),
                ('sent_date', models.DateTimeField(default=django.utils.timezone.now)),
                ('is_read', models.BooleanField(default=False)),
                ('sent_by', models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='sent_volunteer_messages', to=settings.AUTH_USER_MODEL)),
                ('task', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='communications', to='volunteers.volunteertask')),
                ('volunteer', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='communications', to='volunteers.volunteerprofile')),
            ],
            options={
                'ordering': ['-sent_date', '-id'],
            },
        ),
    ]
