import uuid

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Team',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('uid', models.UUIDField(default=uuid.uuid4, editable=False, help_text='Stable public identifier of the team', unique=True)),
                ('name', models.CharField(help_text='Display name of the organization', max_length=200)),
                ('short_description', models.TextField(blank=True, default='', help_text='One or two sentences describing the organization')),
                ('website', models.URLField(blank=True, default='', help_text='Public website of the organization')),
                ('industry', models.CharField(blank=True, default='', help_text='Industry the team operates in', max_length=200)),
                ('stage', models.CharField(blank=True, default='', help_text="Funding stage of the team (e.g., 'Pre-seed', 'Seed')", max_length=200)),
                ('is_fund', models.BooleanField(default=False, help_text='Whether the organization is an investment fund')),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Team',
                'verbose_name_plural': 'Teams',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='TeamMemberRole',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('team_lead', models.BooleanField(default=False, help_text='Whether the identity leads the team')),
                ('main_team', models.BooleanField(default=False, help_text="Whether this is the identity's primary team")),
                ('investment_team', models.BooleanField(default=False, help_text="Whether the identity is part of the team's investment committee")),
                ('role', models.CharField(blank=True, default='', help_text='Free-text job title within the team', max_length=200)),
                ('tags', models.JSONField(blank=True, default=list, help_text='Free-text tags attached to the membership')),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('identity', models.ForeignKey(help_text='Identity holding the membership', on_delete=django.db.models.deletion.CASCADE, related_name='team_roles', to=settings.AUTH_USER_MODEL)),
                ('team', models.ForeignKey(help_text='Team the identity belongs to', on_delete=django.db.models.deletion.CASCADE, related_name='member_roles', to='teams.team')),
            ],
            options={
                'verbose_name': 'Team member role',
                'verbose_name_plural': 'Team member roles',
                'ordering': ['team', 'pk'],
                'constraints': [models.UniqueConstraint(fields=('identity', 'team'), name='team_member_role_identity_team_unique')],
            },
        ),
        migrations.CreateModel(
            name='InvestorProfile',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('investment_type', models.CharField(blank=True, choices=[('ANGEL', 'Angel'), ('FUND', 'Fund'), ('ANGEL_AND_FUND', 'Angel and fund')], default='', help_text='Type of investor', max_length=20)),
                ('typical_check_size', models.PositiveBigIntegerField(blank=True, help_text='Typical check size in USD', null=True)),
                ('invest_in_startup_stages', models.JSONField(blank=True, default=list, help_text='Startup stages the investor invests in')),
                ('sec_rules_accepted', models.BooleanField(default=False, help_text='Whether the investor accepted the SEC accredited investor rules')),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('identity', models.OneToOneField(blank=True, help_text='Individual investor owning the profile', null=True, on_delete=django.db.models.deletion.CASCADE, related_name='investor_profile', to=settings.AUTH_USER_MODEL)),
                ('team', models.OneToOneField(blank=True, help_text='Fund owning the profile', null=True, on_delete=django.db.models.deletion.CASCADE, related_name='investor_profile', to='teams.team')),
            ],
            options={
                'verbose_name': 'Investor profile',
                'verbose_name_plural': 'Investor profiles',
                'constraints': [models.CheckConstraint(condition=models.Q(models.Q(('identity__isnull', False), ('team__isnull', True)), models.Q(('identity__isnull', True), ('team__isnull', False)), _connector='OR'), name='investor_profile_single_owner')],
            },
        ),
    ]
