"""
Event names and payload validation for the chat WebSocket.

Every frame is a JSON object ``{"event": <name>, "data": <payload>}``. Each
inbound event has its own serializer; ``parse_frame`` validates a raw frame
against it before the consumer dispatches anything.
"""

import json

from rest_framework import serializers

from notechat.exceptions import InvalidInput, flatten_detail

# Inbound
CONVERSATION_JOIN = 'conversation:join'
CONVERSATION_LEAVE = 'conversation:leave'
MESSAGE_SEND = 'message:send'
TYPING_START = 'typing:start'
TYPING_STOP = 'typing:stop'
MESSAGES_READ = 'messages:read'
HEARTBEAT = 'heartbeat'

# Outbound
MESSAGE_RECEIVE = 'message:receive'
TYPING_UPDATE = 'typing:update'
MESSAGES_READ_UPDATE = 'messages:read:update'
USER_ONLINE = 'user:online'
USER_OFFLINE = 'user:offline'
HEARTBEAT_ACK = 'heartbeat:ack'
ERROR = 'error'

# Channel group names only allow ASCII letters, digits, hyphens, underscores and periods.
CONVERSATION_ID_PATTERN = r'^[A-Za-z0-9_.\-]{1,80}$'


class ConversationRefSerializer(serializers.Serializer):
    """Payload naming a conversation, sent either bare or as an object."""

    conversationId = serializers.RegexField(CONVERSATION_ID_PATTERN, max_length=80)

    def to_internal_value(self, data):
        if isinstance(data, str):
            data = {'conversationId': data}
        return super().to_internal_value(data)


class MessageSendSerializer(serializers.Serializer):
    conversationId = serializers.RegexField(CONVERSATION_ID_PATTERN, max_length=80)
    # Emptiness and length are checked after participation, in the service.
    content = serializers.CharField(
        required=False, allow_blank=True, allow_null=True, trim_whitespace=False
    )


class EmptySerializer(serializers.Serializer):
    def to_internal_value(self, data):
        return {}


INBOUND_SERIALIZERS = {
    CONVERSATION_JOIN: ConversationRefSerializer,
    CONVERSATION_LEAVE: ConversationRefSerializer,
    MESSAGE_SEND: MessageSendSerializer,
    TYPING_START: ConversationRefSerializer,
    TYPING_STOP: ConversationRefSerializer,
    MESSAGES_READ: ConversationRefSerializer,
    HEARTBEAT: EmptySerializer,
}


def parse_frame(text_data):
    """
    Decode and validate one inbound frame.

    Returns:
        tuple: ``(event, payload)`` where payload is the validated data

    Raises:
        InvalidInput: for malformed JSON, unknown events or invalid payloads
    """
    try:
        frame = json.loads(text_data)
    except (TypeError, ValueError):
        raise InvalidInput('Invalid JSON format')

    if not isinstance(frame, dict):
        raise InvalidInput('Frame must be a JSON object')

    event = frame.get('event')
    serializer_class = INBOUND_SERIALIZERS.get(event) if isinstance(event, str) else None
    if serializer_class is None:
        raise InvalidInput('Unknown event type')

    payload = frame.get('data')
    serializer = serializer_class(data={} if payload is None else payload)
    if not serializer.is_valid():
        raise InvalidInput(flatten_detail(serializer.errors))
    return event, serializer.validated_data


def encode_frame(event, data):
    return json.dumps({'event': event, 'data': data}, default=str)
