from rest_framework import serializers

from users.serializers import UserSummarySerializer

from .models import Friendship


class FriendshipSerializer(serializers.ModelSerializer):
    requester = UserSummarySerializer(read_only=True)
    recipient = UserSummarySerializer(read_only=True)

    class Meta:
        model = Friendship
        fields = ['id', 'requester', 'recipient', 'status', 'created_at', 'updated_at']
        read_only_fields = fields


class FriendSerializer(serializers.Serializer):
    """One entry of the friend list, seen from the requesting user."""

    friendship_id = serializers.IntegerField(source='id')
    user = serializers.SerializerMethodField()
    since = serializers.DateTimeField(source='updated_at')

    def get_user(self, obj):
        return UserSummarySerializer(obj.other_party(self.context['user_id'])).data


class PendingRequestSerializer(serializers.Serializer):
    friendship_id = serializers.IntegerField(source='id')
    user = serializers.SerializerMethodField()
    sent_at = serializers.DateTimeField(source='created_at')

    def get_user(self, obj):
        return UserSummarySerializer(obj.other_party(self.context['user_id'])).data
