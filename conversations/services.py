"""
Conversation directory and message log operations.

Both the REST views and the WebSocket consumer go through this module, so
every precondition and invariant is enforced in one place. Failures are
raised as ``notechat.exceptions`` errors; nothing here touches the channel
layer.
"""

import html
import logging
import math

import bleach
from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import Q
from django.utils import timezone

from friends.services import are_friends
from notechat.exceptions import InvalidInput, NotFound

from .models import Conversation, ConversationMessage, pair_key_for

logger = logging.getLogger(__name__)


def sanitize_content(content):
    """Strip any markup from message content, leaving plain text."""
    # bleach escapes what it keeps; decode so stored text is what was typed.
    return html.unescape(bleach.clean(content, tags=[], attributes={}, strip=True))


def _bounded_content(content):
    if not content:
        raise InvalidInput('Message content is required')
    if len(content) > settings.CHAT_MAX_MESSAGE_LENGTH:
        raise InvalidInput(
            f'Message cannot exceed {settings.CHAT_MAX_MESSAGE_LENGTH} characters'
        )
    return content


def _clean_group_name(name):
    if not isinstance(name, str) or not name.strip():
        raise InvalidInput('Group name is required')
    name = name.strip()
    if len(name) > settings.CHAT_MAX_GROUP_NAME_LENGTH:
        raise InvalidInput(
            f'Group name cannot exceed {settings.CHAT_MAX_GROUP_NAME_LENGTH} characters'
        )
    return name


def _clean_id_list(ids, field='member_ids'):
    if not isinstance(ids, (list, tuple)) or not ids:
        raise InvalidInput(f'{field} must be a non-empty list')
    cleaned = []
    for value in ids:
        if not isinstance(value, str) or not value.strip():
            raise InvalidInput(f'{field} must contain user ids')
        if value.strip() not in cleaned:
            cleaned.append(value.strip())
    return cleaned


class ConversationService:
    """
    Service layer for conversations, membership, messages and read receipts
    """

    @staticmethod
    def get_for_participant(user_id, conversation_id):
        """
        Return the conversation if ``user_id`` participates in it.

        Raises NotFound both when it does not exist and when the caller is not
        a participant.
        """
        conversation = Conversation.objects.filter(
            conversation_id=conversation_id, participants__user_id=user_id
        ).select_related('admin', 'last_message_sender').first()
        if conversation is None:
            raise NotFound('Conversation not found')
        return conversation

    @staticmethod
    def _get_administered_group(user_id, conversation_id):
        conversation = Conversation.objects.select_for_update().filter(
            conversation_id=conversation_id,
            type=Conversation.TYPE_GROUP,
            admin_id=user_id,
        ).first()
        if conversation is None:
            raise NotFound('Group not found or not admin')
        return conversation

    @staticmethod
    def _lock_for_participant(user_id, conversation_id):
        """
        Like get_for_participant, but holds a row lock until the surrounding
        transaction ends, so membership counts read afterwards stay valid.
        """
        conversation = Conversation.objects.select_for_update().filter(
            conversation_id=conversation_id, participants__user_id=user_id
        ).first()
        if conversation is None:
            raise NotFound('Conversation not found')
        return conversation

    @staticmethod
    def list_for_user(user_id):
        return list(
            Conversation.objects.filter(participants__user_id=user_id)
            .select_related('admin', 'last_message_sender')
            .prefetch_related('participants')
            .order_by('-updated_at')
        )

    @staticmethod
    def conversation_ids_for_user(user_id):
        return list(
            Conversation.objects.filter(participants__user_id=user_id).values_list(
                'conversation_id', flat=True
            )
        )

    @staticmethod
    def unread_count(user_id, conversation):
        """Messages in ``conversation`` whose read-by set excludes the user."""
        return conversation.messages.exclude(read_by__user_id=user_id).count()

    # Creation

    @staticmethod
    def create_personal(user, other_id):
        """
        Find or create the personal conversation between ``user`` and ``other_id``.

        Returns:
            tuple: ``(conversation, created)``
        """
        if not isinstance(other_id, str) or not other_id or other_id == user.user_id:
            raise InvalidInput('Personal chat requires exactly 2 participants')

        if not are_friends(user.user_id, other_id):
            raise InvalidInput('Can only chat with friends')

        key = pair_key_for(user.user_id, other_id)
        existing = Conversation.objects.filter(pair_key=key).first()
        if existing:
            return existing, False

        try:
            with transaction.atomic():
                conversation = Conversation.objects.create(
                    type=Conversation.TYPE_PERSONAL, pair_key=key
                )
                conversation.participants.add(user.user_id, other_id)
        except IntegrityError:
            # Both sides opened the chat at once; the other create won.
            return Conversation.objects.get(pair_key=key), False

        logger.info(
            'Personal conversation %s created for %s and %s',
            conversation.conversation_id, user.user_id, other_id,
        )
        return conversation, True

    @staticmethod
    def create_group(user, member_ids, name):
        name = _clean_group_name(name)
        members = [m for m in _clean_id_list(member_ids, 'participant_ids') if m != user.user_id]

        size = len(members) + 1
        if size > settings.CHAT_MAX_GROUP_SIZE:
            raise InvalidInput(f'Group cannot exceed {settings.CHAT_MAX_GROUP_SIZE} members')
        if size < 2:
            raise InvalidInput('Group requires at least 2 members')

        for member_id in members:
            if not are_friends(user.user_id, member_id):
                raise InvalidInput('Can only add friends to group')

        with transaction.atomic():
            conversation = Conversation.objects.create(
                type=Conversation.TYPE_GROUP, name=name, admin=user
            )
            conversation.participants.add(user.user_id, *members)

        logger.info(
            'Group %s created by %s with %d members',
            conversation.conversation_id, user.user_id, size,
        )
        return conversation

    # Group membership

    @staticmethod
    def add_members(user, conversation_id, member_ids):
        member_ids = _clean_id_list(member_ids)
        with transaction.atomic():
            conversation = ConversationService._get_administered_group(
                user.user_id, conversation_id
            )
            current = set(conversation.participants.values_list('user_id', flat=True))
            new_members = [m for m in member_ids if m not in current]

            if len(current) + len(new_members) > settings.CHAT_MAX_GROUP_SIZE:
                raise InvalidInput(
                    f'Group cannot exceed {settings.CHAT_MAX_GROUP_SIZE} members'
                )

            for member_id in new_members:
                if not are_friends(user.user_id, member_id):
                    raise InvalidInput('Can only add friends to group')

            if new_members:
                conversation.participants.add(*new_members)
                conversation.save(update_fields=['updated_at'])
        return conversation

    @staticmethod
    def remove_members(user, conversation_id, member_ids):
        member_ids = _clean_id_list(member_ids)
        with transaction.atomic():
            conversation = ConversationService._get_administered_group(
                user.user_id, conversation_id
            )
            if user.user_id in member_ids:
                raise InvalidInput('Admin cannot be removed')

            current = set(conversation.participants.values_list('user_id', flat=True))
            removed = current.intersection(member_ids)
            if len(current) - len(removed) < 2:
                raise InvalidInput('Group must have at least 2 members')

            if removed:
                conversation.participants.remove(*removed)
                conversation.save(update_fields=['updated_at'])
        return conversation

    @staticmethod
    def rename(user, conversation_id, name):
        name = _clean_group_name(name)
        with transaction.atomic():
            conversation = ConversationService._get_administered_group(
                user.user_id, conversation_id
            )
            conversation.name = name
            conversation.save(update_fields=['name', 'updated_at'])
        return conversation

    @staticmethod
    def leave(user, conversation_id):
        """
        Leave a conversation.

        Personal conversations and groups whose admin leaves are deleted
        together with all their messages. A member leaving a group that would
        drop below two participants deletes the group as well.

        Returns:
            dict: ``{'deleted': bool, 'message': str}``
        """
        with transaction.atomic():
            conversation = ConversationService._lock_for_participant(
                user.user_id, conversation_id
            )

            if conversation.type == Conversation.TYPE_PERSONAL:
                conversation.delete()
                logger.info('Conversation %s deleted by %s', conversation_id, user.user_id)
                return {'deleted': True, 'message': 'Conversation deleted'}

            if conversation.admin_id == user.user_id:
                conversation.delete()
                logger.info('Group %s deleted by admin %s', conversation_id, user.user_id)
                return {'deleted': True, 'message': 'Group deleted'}

            if conversation.participants.count() - 1 < 2:
                conversation.delete()
                logger.info(
                    'Group %s deleted after %s left below minimum size',
                    conversation_id, user.user_id,
                )
                return {'deleted': True, 'message': 'Group deleted'}

            conversation.participants.remove(user.user_id)
            conversation.save(update_fields=['updated_at'])
        return {'deleted': False, 'message': 'Left group'}

    # Messages

    @staticmethod
    def clean_content(content):
        """
        Trim and bound message content, then strip markup.

        The stored text is plain: tags are removed and entities are decoded,
        so ``a < b & c`` is kept exactly as sent. Bounds are checked both on
        the raw text and on the sanitised result.

        Raises:
            InvalidInput: when the content is empty or too long
        """
        if not isinstance(content, str):
            raise InvalidInput('Message content is required')
        content = _bounded_content(content.strip())
        return _bounded_content(sanitize_content(content).strip())

    @staticmethod
    def send_message(user, conversation_id, content):
        """
        Append a message and refresh the conversation's last message snapshot.

        Participation is checked before the content, so a non-participant
        always gets NotFound.
        """
        conversation = ConversationService.get_for_participant(user.user_id, conversation_id)
        content = ConversationService.clean_content(content)

        with transaction.atomic():
            message = ConversationMessage.objects.create(
                conversation=conversation, sender=user, content=content
            )
            message.read_by.add(user)

            # A slower concurrent send must not roll the snapshot back.
            Conversation.objects.filter(pk=conversation.pk).filter(
                Q(last_message_at__isnull=True) | Q(last_message_at__lte=message.created_at)
            ).update(
                last_message_content=content[:settings.CHAT_LAST_MESSAGE_PREVIEW_LENGTH],
                last_message_sender=user,
                last_message_at=message.created_at,
                updated_at=timezone.now(),
            )

        message.conversation = conversation
        return message

    @staticmethod
    def mark_read(user, conversation_id):
        """
        Add ``user`` to the read-by set of every message missing it.

        Additive only, so repeated or concurrent calls are safe.

        Returns:
            int: number of messages newly marked
        """
        conversation = ConversationService.get_for_participant(user.user_id, conversation_id)

        unread_ids = list(
            conversation.messages.exclude(read_by__user_id=user.user_id).values_list(
                'id', flat=True
            )
        )
        if unread_ids:
            ReadBy = ConversationMessage.read_by.through
            ReadBy.objects.bulk_create(
                [ReadBy(conversationmessage_id=mid, user_id=user.user_id) for mid in unread_ids],
                ignore_conflicts=True,
            )
        return len(unread_ids)

    @staticmethod
    def messages_page(user_id, conversation_id, page=1, limit=None):
        """
        Get one page of messages, newest page first, each page oldest first
        """
        if limit is None:
            limit = settings.CHAT_MESSAGES_PAGE_SIZE
        conversation = ConversationService.get_for_participant(user_id, conversation_id)

        messages = conversation.messages.select_related('sender').prefetch_related(
            'read_by'
        ).order_by('-created_at', '-id')

        total = messages.count()
        offset = (page - 1) * limit
        items = list(messages[offset:offset + limit])
        items.reverse()

        return {
            'conversation': conversation,
            'messages': items,
            'pagination': {
                'page': page,
                'limit': limit,
                'total': total,
                'pages': math.ceil(total / limit),
                'has_more': offset + len(items) < total,
            },
        }

