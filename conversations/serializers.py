from rest_framework import serializers

from users.serializers import UserIdentitySerializer, UserSummarySerializer

from .models import Conversation, ConversationMessage
from .services import ConversationService


class ConversationMessageSerializer(serializers.ModelSerializer):
    conversation = serializers.CharField(source='conversation.conversation_id', read_only=True)
    sender = UserIdentitySerializer(read_only=True)
    read_by = serializers.PrimaryKeyRelatedField(many=True, read_only=True)

    class Meta:
        model = ConversationMessage
        fields = ['id', 'conversation', 'sender', 'content', 'read_by', 'created_at']
        read_only_fields = fields


class LastMessageSerializer(serializers.Serializer):
    content = serializers.CharField()
    sender = serializers.CharField()
    created_at = serializers.DateTimeField()


class ConversationSerializer(serializers.ModelSerializer):
    participants = UserSummarySerializer(many=True, read_only=True)
    admin = UserIdentitySerializer(read_only=True)
    last_message = LastMessageSerializer(read_only=True, allow_null=True)

    class Meta:
        model = Conversation
        fields = [
            'conversation_id', 'type', 'name', 'participants', 'admin',
            'last_message', 'created_at', 'updated_at',
        ]
        read_only_fields = fields


class ConversationListSerializer(ConversationSerializer):
    """Conversation plus the caller's unread count"""

    unread_count = serializers.SerializerMethodField()

    class Meta(ConversationSerializer.Meta):
        fields = ConversationSerializer.Meta.fields + ['unread_count']
        read_only_fields = fields

    def get_unread_count(self, obj):
        user_id = self.context.get('user_id')
        if user_id:
            return ConversationService.unread_count(user_id, obj)
        return 0


class ConversationCreateSerializer(serializers.Serializer):
    type = serializers.ChoiceField(choices=Conversation.TYPE_CHOICES)
    participant_ids = serializers.ListField(
        child=serializers.CharField(max_length=64), allow_empty=False
    )
    name = serializers.CharField(required=False, allow_blank=True, allow_null=True, trim_whitespace=False)


class MembershipUpdateSerializer(serializers.Serializer):
    ACTION_CHOICES = ['add', 'remove']

    action = serializers.ChoiceField(choices=ACTION_CHOICES)
    member_ids = serializers.ListField(
        child=serializers.CharField(max_length=64), allow_empty=False
    )


class RenameSerializer(serializers.Serializer):
    name = serializers.CharField(allow_blank=True, trim_whitespace=False)


class MessageCreateSerializer(serializers.Serializer):
    conversation_id = serializers.CharField(max_length=100)
    content = serializers.CharField(
        required=False, allow_blank=True, allow_null=True, trim_whitespace=False
    )
