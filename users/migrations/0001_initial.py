import django.utils.timezone
from django.db import migrations, models

import users.models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='User',
            fields=[
                (
                    'user_id',
                    models.CharField(
                        max_length=64, primary_key=True, serialize=False, unique=True
                    ),
                ),
                ('name', models.CharField(max_length=100)),
                ('email', models.EmailField(max_length=255, unique=True)),
                ('is_online', models.BooleanField(default=False)),
                (
                    'last_seen',
                    models.DateTimeField(default=django.utils.timezone.now),
                ),
                (
                    'preferences',
                    models.JSONField(
                        blank=True, default=users.models.default_preferences
                    ),
                ),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'db_table': 'users',
                'ordering': ['name'],
                'indexes': [
                    models.Index(fields=['name'], name='users_name_idx')
                ],
            },
        ),
    ]
