"""
REST fallback for clients that cannot hold a WebSocket open.

These views share ConversationService with the consumer, so preconditions
and their order are identical. They persist only; nothing is broadcast.
"""

from django.conf import settings
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from conversations.serializers import ConversationMessageSerializer, MessageCreateSerializer
from conversations.services import ConversationService
from notechat.pagination import parse_page_params


class MessageCreateView(APIView):
    def post(self, request):
        """Send a message to a conversation the caller belongs to"""
        serializer = MessageCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        message = ConversationService.send_message(
            request.user, data['conversation_id'], data.get('content')
        )
        return Response(
            ConversationMessageSerializer(message).data, status=status.HTTP_201_CREATED
        )


class ConversationMessagesHistoryView(APIView):
    """
    HTTP endpoint for paginated conversation history
    """

    def get(self, request, conversation_id):
        page, limit = parse_page_params(request.GET, settings.CHAT_MESSAGES_PAGE_SIZE)
        result = ConversationService.messages_page(
            request.user.user_id, conversation_id, page=page, limit=limit
        )
        return Response({
            'messages': ConversationMessageSerializer(result['messages'], many=True).data,
            'pagination': result['pagination'],
        })


class MarkMessagesAsReadView(APIView):
    def put(self, request, conversation_id):
        marked = ConversationService.mark_read(request.user, conversation_id)
        return Response({'message': 'Messages marked as read', 'marked': marked})
