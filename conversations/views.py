from django.conf import settings
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from notechat.exceptions import InvalidInput
from notechat.pagination import parse_page_params

from .models import Conversation
from .serializers import (
    ConversationCreateSerializer,
    ConversationListSerializer,
    ConversationMessageSerializer,
    ConversationSerializer,
    MembershipUpdateSerializer,
    RenameSerializer,
)
from .services import ConversationService


def _detail(conversation):
    """Re-read a conversation with everything its serializer embeds."""
    conversation = Conversation.objects.select_related(
        'admin', 'last_message_sender'
    ).prefetch_related('participants').get(pk=conversation.pk)
    return ConversationSerializer(conversation).data


class ConversationListView(APIView):
    """List the caller's conversations and create new ones"""

    def get(self, request):
        """All conversations of the caller, most recently active first"""
        user_id = request.user.user_id
        conversations = ConversationService.list_for_user(user_id)
        serializer = ConversationListSerializer(
            conversations, many=True, context={'request': request, 'user_id': user_id}
        )
        return Response(serializer.data)

    def post(self, request):
        """
        Create a personal or group conversation.

        A personal conversation that already exists for the pair is returned
        with 200 instead of creating a duplicate.
        """
        serializer = ConversationCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        if data['type'] == Conversation.TYPE_PERSONAL:
            others = [pid for pid in dict.fromkeys(data['participant_ids']) if pid != request.user.user_id]
            if len(others) != 1:
                raise InvalidInput('Personal chat requires exactly 2 participants')
            conversation, created = ConversationService.create_personal(request.user, others[0])
            return Response(
                _detail(conversation),
                status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
            )

        conversation = ConversationService.create_group(
            request.user, data['participant_ids'], data.get('name')
        )
        return Response(_detail(conversation), status=status.HTTP_201_CREATED)


class ConversationDetailView(APIView):
    """Get a conversation with a page of messages, or leave it"""

    def get(self, request, conversation_id):
        page, limit = parse_page_params(request.GET, settings.CHAT_MESSAGES_PAGE_SIZE)
        result = ConversationService.messages_page(
            request.user.user_id, conversation_id, page=page, limit=limit
        )
        return Response({
            'conversation': _detail(result['conversation']),
            'messages': ConversationMessageSerializer(result['messages'], many=True).data,
            'pagination': result['pagination'],
        })

    def delete(self, request, conversation_id):
        """Leave a conversation; personal chats and admin departures delete it"""
        outcome = ConversationService.leave(request.user, conversation_id)
        return Response(outcome)


class ConversationMembersView(APIView):
    def put(self, request, conversation_id):
        """Add or remove group members (admin only)"""
        serializer = MembershipUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        if data['action'] == 'add':
            conversation = ConversationService.add_members(
                request.user, conversation_id, data['member_ids']
            )
        else:
            conversation = ConversationService.remove_members(
                request.user, conversation_id, data['member_ids']
            )
        return Response(_detail(conversation))


class ConversationRenameView(APIView):
    def put(self, request, conversation_id):
        """Rename a group (admin only)"""
        serializer = RenameSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        conversation = ConversationService.rename(
            request.user, conversation_id, serializer.validated_data['name']
        )
        return Response(_detail(conversation))
