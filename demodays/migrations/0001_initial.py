import uuid

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('events', '0001_initial'),
        ('teams', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Upload',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('uid', models.UUIDField(default=uuid.uuid4, editable=False, help_text='Identifier issued by the upload service', unique=True)),
                ('kind', models.CharField(choices=[('IMAGE', 'Image'), ('SLIDE', 'Slide deck'), ('VIDEO', 'Video'), ('OTHER', 'Other')], help_text='Content kind of the uploaded file', max_length=10)),
                ('url', models.URLField(help_text='Public URL of the stored file', max_length=500)),
                ('filename', models.CharField(blank=True, default='', help_text='Original filename', max_length=255)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                'verbose_name': 'Upload',
                'verbose_name_plural': 'Uploads',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='Participant',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('uid', models.UUIDField(default=uuid.uuid4, editable=False, help_text='Stable public identifier of the participant', unique=True)),
                ('type', models.CharField(choices=[('INVESTOR', 'Investor'), ('FOUNDER', 'Founder')], help_text='Whether the identity joins as investor or founder', max_length=10)),
                ('status', models.CharField(choices=[('PENDING', 'Pending review'), ('INVITED', 'Invited'), ('ENABLED', 'Enabled'), ('DISABLED', 'Disabled')], default='PENDING', help_text='Access state of the participant', max_length=10)),
                ('is_demo_day_admin', models.BooleanField(default=False, help_text='Whether the participant may see draft profiles')),
                ('has_early_access', models.BooleanField(default=False, help_text='Whether the participant sees the demo day during early access')),
                ('confidentiality_accepted', models.BooleanField(default=False, help_text='Whether the participant accepted the confidentiality terms')),
                ('team_lead_request_status', models.CharField(blank=True, choices=[('REQUESTED', 'Requested'), ('APPROVED', 'Approved'), ('REJECTED', 'Rejected')], help_text="State of the founder's team-lead request, if any", max_length=10, null=True)),
                ('status_updated_at', models.DateTimeField(blank=True, help_text='When the status last changed', null=True)),
                ('is_deleted', models.BooleanField(default=False, help_text='Soft-delete flag. Rows are never physically removed.')),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('demo_day', models.ForeignKey(help_text='Demo day the identity is registered for', on_delete=django.db.models.deletion.CASCADE, related_name='participants', to='events.demoday')),
                ('identity', models.ForeignKey(help_text='Registered identity', on_delete=django.db.models.deletion.CASCADE, related_name='demo_day_participations', to=settings.AUTH_USER_MODEL)),
                ('team', models.ForeignKey(blank=True, help_text='Team the founder pitches for. Founders only.', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='demo_day_participants', to='teams.team')),
            ],
            options={
                'verbose_name': 'Participant',
                'verbose_name_plural': 'Participants',
                'ordering': ['-created_at'],
                'indexes': [models.Index(fields=['demo_day', 'status'], name='participant_demoday_status_idx'), models.Index(fields=['demo_day', 'team'], name='participant_demoday_team_idx')],
                'constraints': [models.UniqueConstraint(fields=('demo_day', 'identity'), name='participant_demo_day_identity_unique'), models.CheckConstraint(condition=models.Q(('type', 'FOUNDER'), ('team__isnull', True), _connector='OR'), name='participant_team_only_for_founders')],
            },
        ),
        migrations.CreateModel(
            name='FundraisingProfile',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('uid', models.UUIDField(default=uuid.uuid4, editable=False, help_text='Stable public identifier of the profile', unique=True)),
                ('description', models.TextField(blank=True, default='', help_text='Free-text pitch description')),
                ('status', models.CharField(choices=[('DRAFT', 'Draft'), ('PUBLISHED', 'Published')], default='DRAFT', editable=False, help_text='Derived publication status', max_length=10)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('demo_day', models.ForeignKey(help_text='Demo day the materials are presented at', on_delete=django.db.models.deletion.CASCADE, related_name='fundraising_profiles', to='events.demoday')),
                ('one_pager_upload', models.ForeignKey(blank=True, help_text='One-pager image or slide', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to='demodays.upload')),
                ('team', models.ForeignKey(help_text='Team the materials belong to', on_delete=django.db.models.deletion.CASCADE, related_name='fundraising_profiles', to='teams.team')),
                ('video_upload', models.ForeignKey(blank=True, help_text='Pitch video', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to='demodays.upload')),
            ],
            options={
                'verbose_name': 'Fundraising profile',
                'verbose_name_plural': 'Fundraising profiles',
                'ordering': ['team__name'],
                'constraints': [models.UniqueConstraint(fields=('team', 'demo_day'), name='fundraising_profile_team_demo_day_unique')],
            },
        ),
    ]
