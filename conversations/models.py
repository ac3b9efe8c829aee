import uuid

from django.db import models

from users.models import User


def generate_conversation_id():
    return f'conv_{uuid.uuid4().hex}'


def pair_key_for(user_a, user_b):
    """Key shared by both orderings of a user pair."""
    return ':'.join(sorted([str(user_a), str(user_b)]))


class Conversation(models.Model):
    TYPE_PERSONAL = 'personal'
    TYPE_GROUP = 'group'

    TYPE_CHOICES = [
        (TYPE_PERSONAL, 'Personal'),
        (TYPE_GROUP, 'Group'),
    ]

    conversation_id = models.CharField(
        max_length=100, unique=True, default=generate_conversation_id
    )
    type = models.CharField(max_length=10, choices=TYPE_CHOICES)
    participants = models.ManyToManyField(User, related_name='conversations')
    name = models.CharField(max_length=50, null=True, blank=True)
    admin = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='administered_conversations',
        null=True,
        blank=True,
    )
    # Only set for personal conversations; enforces one per unordered pair.
    pair_key = models.CharField(max_length=200, unique=True, null=True, blank=True)
    last_message_content = models.CharField(max_length=100, blank=True, default='')
    last_message_sender = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        related_name='+',
        null=True,
        blank=True,
    )
    last_message_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'conversations_conversation'
        ordering = ['-updated_at']

    def __str__(self):
        return f'Conversation {self.conversation_id}'

    @property
    def is_group(self):
        return self.type == self.TYPE_GROUP

    @property
    def last_message(self):
        if self.last_message_at is None:
            return None
        return {
            'content': self.last_message_content,
            'sender': self.last_message_sender_id,
            'created_at': self.last_message_at,
        }


class ConversationMessage(models.Model):
    conversation = models.ForeignKey(
        Conversation, on_delete=models.CASCADE, related_name='messages'
    )
    sender = models.ForeignKey(
        User, on_delete=models.CASCADE, related_name='sent_messages'
    )
    content = models.TextField()
    read_by = models.ManyToManyField(User, related_name='read_messages', blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'conversations_conversationmessage'
        ordering = ['created_at', 'id']
        indexes = [
            models.Index(fields=['conversation', 'created_at'], name='message_conversation_idx'),
        ]

    def __str__(self):
        return f'{self.sender_id}: {self.content[:50]}...'
