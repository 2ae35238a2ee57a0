import uuid

import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
    ]

    operations = [
        migrations.CreateModel(
            name='DemoDay',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('uid', models.UUIDField(default=uuid.uuid4, editable=False, help_text='Stable public identifier of the demo day', unique=True)),
                ('slug', models.SlugField(help_text='Demo day slug. Name used in URLs and for import commands.', max_length=100, unique=True)),
                ('title', models.CharField(help_text='Display title of the demo day. Include the season if applicable.', max_length=200)),
                ('description', models.TextField(blank=True, default='', help_text='Short description shown on the demo day landing page')),
                ('start_date', models.DateTimeField(help_text='When the demo day opens')),
                ('end_date', models.DateTimeField(help_text='When the demo day closes')),
                ('status', models.CharField(choices=[('UPCOMING', 'Upcoming'), ('REGISTRATION_OPEN', 'Registration open'), ('EARLY_ACCESS', 'Early access'), ('ACTIVE', 'Active'), ('COMPLETED', 'Completed'), ('ARCHIVED', 'Archived')], default='UPCOMING', help_text='Current lifecycle status', max_length=20)),
                ('host', models.CharField(blank=True, default='', help_text='Name of the organization hosting the demo day', max_length=200)),
                ('notifications_enabled', models.BooleanField(default=False, help_text='Whether participants are emailed when the status changes')),
                ('is_deleted', models.BooleanField(default=False, help_text='Soft-delete flag. Deleted demo days are hidden everywhere.')),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Demo day',
                'verbose_name_plural': 'Demo days',
                'ordering': ['-start_date'],
                'constraints': [models.CheckConstraint(condition=models.Q(('start_date__lte', models.F('end_date'))), name='demo_day_start_before_end')],
            },
        ),
    ]
