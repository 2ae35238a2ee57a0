import uuid

import django.utils.timezone
from django.db import migrations, models

import users.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('auth', '0012_alter_user_first_name_max_length'),
    ]

    operations = [
        migrations.CreateModel(
            name='CustomUser',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('password', models.CharField(max_length=128, verbose_name='password')),
                ('last_login', models.DateTimeField(blank=True, null=True, verbose_name='last login')),
                ('is_superuser', models.BooleanField(default=False, help_text='Designates that this user has all permissions without explicitly assigning them.', verbose_name='superuser status')),
                ('is_staff', models.BooleanField(default=False, help_text='Designates whether the user can log into this admin site.', verbose_name='staff status')),
                ('is_active', models.BooleanField(default=True, help_text='Designates whether this user should be treated as active. Unselect this instead of deleting accounts.', verbose_name='active')),
                ('uid', models.UUIDField(default=uuid.uuid4, editable=False, help_text='Stable public identifier of the identity', unique=True)),
                ('email', models.EmailField(error_messages={'unique': 'A user with that email already exists.'}, max_length=254, unique=True, verbose_name='email address')),
                ('name', models.CharField(blank=True, help_text='Full name shown to other participants. Falls back to the email.', max_length=200)),
                ('access_level', models.CharField(choices=[('L0', 'L0 - New'), ('L1', 'L1 - Unverified'), ('L2', 'L2 - Verified'), ('L3', 'L3 - Member'), ('L4', 'L4 - Active member'), ('L5', 'L5 - Core member'), ('L6', 'L6 - Investor'), ('Rejected', 'Rejected')], default='L0', help_text='Community access tier of the identity', max_length=10)),
                ('twitter_handle', models.CharField(blank=True, default='', help_text="Twitter / X handle without the leading '@'", max_length=100)),
                ('linkedin_handle', models.CharField(blank=True, default='', help_text='LinkedIn profile slug (the part after linkedin.com/in/)', max_length=100)),
                ('telegram_handle', models.CharField(blank=True, help_text='Telegram handle. Owned by at most one identity.', max_length=100, null=True, unique=True)),
                ('date_joined', models.DateTimeField(default=django.utils.timezone.now)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('groups', models.ManyToManyField(blank=True, help_text='The groups this user belongs to. A user will get all permissions granted to each of their groups.', related_name='user_set', related_query_name='user', to='auth.group', verbose_name='groups')),
                ('user_permissions', models.ManyToManyField(blank=True, help_text='Specific permissions for this user.', related_name='user_set', related_query_name='user', to='auth.permission', verbose_name='user permissions')),
            ],
            options={
                'verbose_name': 'identity',
                'verbose_name_plural': 'identities',
            },
            managers=[
                ('objects', users.models.CustomUserManager()),
            ],
        ),
    ]
