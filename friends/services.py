import logging

from django.db import IntegrityError, transaction

from notechat.exceptions import InvalidInput, NotFound
from users.models import User

from .models import Friendship

logger = logging.getLogger(__name__)


def are_friends(user_a, user_b):
    """True when an accepted friendship links the two users in either direction."""
    if user_a == user_b:
        return False
    return Friendship.objects.between(user_a, user_b).accepted().exists()


def connected_user_ids(user_id):
    """Ids of users with a pending or accepted friendship with ``user_id``."""
    ids = set()
    rows = Friendship.objects.involving(user_id).filter(
        status__in=[Friendship.STATUS_PENDING, Friendship.STATUS_ACCEPTED]
    ).values_list('requester_id', 'recipient_id')
    for requester_id, recipient_id in rows:
        ids.add(recipient_id if requester_id == user_id else requester_id)
    return ids


class FriendshipService:
    """
    Friend request lifecycle: send, accept, decline, cancel and remove.
    """

    @staticmethod
    def overview(user):
        friendships = Friendship.objects.involving(user.user_id).accepted().select_related(
            'requester', 'recipient'
        ).order_by('-updated_at')
        received = Friendship.objects.pending().filter(recipient=user).select_related(
            'requester'
        ).order_by('-created_at')
        sent = Friendship.objects.pending().filter(requester=user).select_related(
            'recipient'
        ).order_by('-created_at')
        return {
            'friends': list(friendships),
            'pending_received': list(received),
            'pending_sent': list(sent),
        }

    @staticmethod
    def send_request(user, recipient_id):
        """
        Send a friend request, or re-open a declined one.

        Returns:
            tuple: ``(friendship, created)``
        """
        if user.user_id == recipient_id:
            raise InvalidInput('Cannot send friend request to yourself')

        if not User.objects.filter(user_id=recipient_id).exists():
            raise NotFound('User not found')

        existing = Friendship.objects.between(user.user_id, recipient_id).first()
        if existing:
            if existing.status == Friendship.STATUS_ACCEPTED:
                raise InvalidInput('Already friends')
            if existing.status == Friendship.STATUS_PENDING:
                raise InvalidInput('Friend request already pending')
            if existing.status == Friendship.STATUS_BLOCKED:
                raise InvalidInput('Cannot send request to this user')

            existing.status = Friendship.STATUS_PENDING
            existing.requester = user
            existing.recipient_id = recipient_id
            existing.save()
            return existing, False

        try:
            with transaction.atomic():
                friendship = Friendship.objects.create(
                    requester=user,
                    recipient_id=recipient_id,
                    status=Friendship.STATUS_PENDING,
                )
        except IntegrityError:
            # A duplicate submit of this same request won the insert. The
            # ordered-pair constraint does not catch a crossing reverse request.
            raise InvalidInput('Friend request already pending')

        logger.info('Friend request %s -> %s', user.user_id, recipient_id)
        return friendship, True

    @staticmethod
    def _pending_for_recipient(user, friendship_id):
        friendship = Friendship.objects.pending().filter(
            pk=friendship_id, recipient=user
        ).select_related('requester', 'recipient').first()
        if friendship is None:
            raise NotFound('Friend request not found')
        return friendship

    @staticmethod
    def accept(user, friendship_id):
        friendship = FriendshipService._pending_for_recipient(user, friendship_id)
        friendship.status = Friendship.STATUS_ACCEPTED
        friendship.save(update_fields=['status', 'updated_at'])
        return friendship

    @staticmethod
    def decline(user, friendship_id):
        friendship = FriendshipService._pending_for_recipient(user, friendship_id)
        friendship.status = Friendship.STATUS_DECLINED
        friendship.save(update_fields=['status', 'updated_at'])
        return friendship

    @staticmethod
    def cancel(user, friendship_id):
        deleted, _ = Friendship.objects.pending().filter(
            pk=friendship_id, requester=user
        ).delete()
        if not deleted:
            raise NotFound('Friend request not found')

    @staticmethod
    def remove(user, friend_id):
        deleted, _ = Friendship.objects.between(user.user_id, friend_id).accepted().delete()
        if not deleted:
            raise NotFound('Friendship not found')
