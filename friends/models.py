from django.db import models
from django.db.models import Q

from users.models import User


class FriendshipQuerySet(models.QuerySet):
    def between(self, user_a, user_b):
        """Friendships linking the two users, in either direction."""
        return self.filter(
            Q(requester_id=user_a, recipient_id=user_b)
            | Q(requester_id=user_b, recipient_id=user_a)
        )

    def involving(self, user_id):
        return self.filter(Q(requester_id=user_id) | Q(recipient_id=user_id))

    def accepted(self):
        return self.filter(status=Friendship.STATUS_ACCEPTED)

    def pending(self):
        return self.filter(status=Friendship.STATUS_PENDING)


class Friendship(models.Model):
    STATUS_PENDING = 'pending'
    STATUS_ACCEPTED = 'accepted'
    STATUS_DECLINED = 'declined'
    STATUS_BLOCKED = 'blocked'

    STATUS_CHOICES = [
        (STATUS_PENDING, 'Pending'),
        (STATUS_ACCEPTED, 'Accepted'),
        (STATUS_DECLINED, 'Declined'),
        (STATUS_BLOCKED, 'Blocked'),
    ]

    requester = models.ForeignKey(
        User, on_delete=models.CASCADE, related_name='friend_requests_sent'
    )
    recipient = models.ForeignKey(
        User, on_delete=models.CASCADE, related_name='friend_requests_received'
    )
    status = models.CharField(
        max_length=10, choices=STATUS_CHOICES, default=STATUS_PENDING
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = FriendshipQuerySet.as_manager()

    class Meta:
        unique_together = ('requester', 'recipient')
        indexes = [
            models.Index(fields=['recipient', 'status'], name='friendship_recipient_idx'),
            models.Index(fields=['requester', 'status'], name='friendship_requester_idx'),
        ]

    def __str__(self):
        return f'{self.requester_id} -> {self.recipient_id} ({self.status})'

    def other_party(self, user_id):
        return self.recipient if self.requester_id == user_id else self.requester
