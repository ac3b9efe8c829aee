import django.db.models.deletion
from django.db import migrations, models

import conversations.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('users', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Conversation',
            fields=[
                (
                    'id',
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name='ID',
                    ),
                ),
                (
                    'conversation_id',
                    models.CharField(
                        default=conversations.models.generate_conversation_id,
                        max_length=100,
                        unique=True,
                    ),
                ),
                (
                    'type',
                    models.CharField(
                        choices=[('personal', 'Personal'), ('group', 'Group')],
                        max_length=10,
                    ),
                ),
                ('name', models.CharField(blank=True, max_length=50, null=True)),
                (
                    'pair_key',
                    models.CharField(blank=True, max_length=200, null=True, unique=True),
                ),
                (
                    'last_message_content',
                    models.CharField(blank=True, default='', max_length=100),
                ),
                ('last_message_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                (
                    'admin',
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name='administered_conversations',
                        to='users.user',
                    ),
                ),
                (
                    'last_message_sender',
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name='+',
                        to='users.user',
                    ),
                ),
                (
                    'participants',
                    models.ManyToManyField(
                        related_name='conversations', to='users.user'
                    ),
                ),
            ],
            options={
                'db_table': 'conversations_conversation',
                'ordering': ['-updated_at'],
            },
        ),
        migrations.CreateModel(
            name='ConversationMessage',
            fields=[
                (
                    'id',
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name='ID',
                    ),
                ),
                ('content', models.TextField()),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                (
                    'conversation',
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name='messages',
                        to='conversations.conversation',
                    ),
                ),
                (
                    'read_by',
                    models.ManyToManyField(
                        blank=True, related_name='read_messages', to='users.user'
                    ),
                ),
                (
                    'sender',
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name='sent_messages',
                        to='users.user',
                    ),
                ),
            ],
            options={
                'db_table': 'conversations_conversationmessage',
                'ordering': ['created_at', 'id'],
                'indexes': [
                    models.Index(
                        fields=['conversation', 'created_at'],
                        name='message_conversation_idx',
                    )
                ],
            },
        ),
    ]
