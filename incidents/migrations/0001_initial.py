# Generated migration for the incident registry

from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone

from incidents.models import (
    DisasterIncident,
    IncidentMedia,
    IncidentResource,
    IncidentResponse,
    IncidentUpdate,
)


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='DisasterIncident',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('title', models.CharField(max_length=200)),
                ('incident_type', models.CharField(choices=DisasterIncident.TYPE_CHOICES, max_length=30)),
                ('description', models.TextField()),
                ('location', models.CharField(max_length=300)),
                ('latitude', models.DecimalField(blank=True, decimal_places=6, max_digits=9, null=True)),
                ('longitude', models.DecimalField(blank=True, decimal_places=6, max_digits=9, null=True)),
                ('incident_date', models.DateTimeField()),
                ('severity', models.PositiveSmallIntegerField(choices=DisasterIncident.SEVERITY_CHOICES, default=2)),
                ('status', models.CharField(choices=DisasterIncident.STATUS_CHOICES, default='reported', max_length=30)),
                ('affected_population', models.PositiveIntegerField(default=0)),
                ('casualties', models.PositiveIntegerField(default=0)),
                ('injuries', models.PositiveIntegerField(default=0)),
                ('property_damage_estimate', models.DecimalField(blank=True, decimal_places=2, max_digits=14, null=True)),
                ('infrastructure_damage', models.TextField(blank=True)),
                ('immediate_needs', models.TextField(blank=True)),
                ('resources_required', models.TextField(blank=True)),
                ('access_routes', models.TextField(blank=True)),
                ('weather_conditions', models.CharField(blank=True, max_length=200)),
                ('contact_information', models.CharField(blank=True, max_length=300)),
                ('reported_date', models.DateTimeField(default=django.utils.timezone.now)),
                ('priority', models.CharField(choices=DisasterIncident.PRIORITY_CHOICES, default='medium', max_length=20)),
                ('verification_status', models.CharField(choices=DisasterIncident.VERIFICATION_CHOICES, default='pending', max_length=30)),
                ('verified_date', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('reported_by', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='reported_incidents', to=settings.AUTH_USER_MODEL)),
                ('assigned_to', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='assigned_incidents', to=settings.AUTH_USER_MODEL)),
                ('verified_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='verified_incidents', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Disaster Incident',
                'verbose_name_plural': 'Disaster Incidents',
                'ordering': ['-incident_date', '-id'],
            },
        ),
        migrations.CreateModel(
            name='IncidentUpdate',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('update_text', models.TextField()),
                ('update_type', models.CharField(choices=IncidentUpdate.UPDATE_TYPE_CHOICES, default='general', max_length=30)),
                ('update_date', models.DateTimeField(default=django.utils.timezone.now)),
                ('is_critical', models.BooleanField(default=False)),
                ('incident', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='updates', to='incidents.disasterincident')),
                ('updated_by', models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='incident_updates', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-update_date', '-id'],
            },
        ),
        migrations.CreateModel(
            name='IncidentResource',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('resource_type', models.CharField(choices=IncidentResource.TYPE_CHOICES, max_length=30)),
                ('description', models.CharField(max_length=300)),
                ('quantity_needed', models.PositiveIntegerField(default=1)),
                ('quantity_available', models.PositiveIntegerField(default=0)),
                ('priority', models.CharField(choices=IncidentResource.PRIORITY_CHOICES, default='medium', max_length=20)),
                ('status', models.CharField(choices=IncidentResource.STATUS_CHOICES, default='needed', max_length=20)),
                ('requested_date', models.DateTimeField(default=django.utils.timezone.now)),
                ('required_by_date', models.DateTimeField(blank=True, null=True)),
                ('incident', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='resource_requests', to='incidents.disasterincident')),
                ('requested_by', models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='incident_resource_requests', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-requested_date', '-id'],
            },
        ),
        migrations.CreateModel(
            name='IncidentResponse',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('response_type', models.CharField(choices=IncidentResponse.TYPE_CHOICES, max_length=30)),
                ('description', models.TextField()),
                ('response_date', models.DateTimeField(default=django.utils.timezone.now)),
                ('status', models.CharField(choices=IncidentResponse.STATUS_CHOICES, default='planned', max_length=20)),
                ('resources_used', models.TextField(blank=True)),
                ('personnel_involved', models.PositiveIntegerField(default=0)),
                ('cost', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ('completion_date', models.DateTimeField(blank=True, null=True)),
                ('notes', models.TextField(blank=True)),
                ('incident', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='responses', to='incidents.disasterincident')),
                ('responded_by', models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='incident_responses', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-response_date', '-id'],
            },
        ),
        migrations.CreateModel(
            name='IncidentMedia',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('file_name', models.CharField(max_length=255)),
                ('file_path', models.CharField(help_text='Storage path or URL of the file', max_length=500)),
                ('media_type', models.CharField(choices=IncidentMedia.MEDIA_TYPE_CHOICES, default='image', max_length=20)),
                ('file_size', models.PositiveBigIntegerField(default=0)),
                ('description', models.CharField(blank=True, max_length=300)),
                ('upload_date', models.DateTimeField(default=django.utils.timezone.now)),
                ('incident', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='media', to='incidents.disasterincident')),
                ('uploaded_by', models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='incident_media', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name_plural': 'Incident media',
                'ordering': ['-upload_date', '-id'],
            },
        ),
    ]
