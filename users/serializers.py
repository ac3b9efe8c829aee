from rest_framework import serializers

from .models import User


class UserSummarySerializer(serializers.ModelSerializer):
    """Public fields shown wherever another user is embedded."""

    id = serializers.CharField(source='user_id', read_only=True)

    class Meta:
        model = User
        fields = ['id', 'name', 'email', 'is_online', 'last_seen']
        read_only_fields = fields


class UserProfileSerializer(UserSummarySerializer):
    class Meta(UserSummarySerializer.Meta):
        fields = UserSummarySerializer.Meta.fields + ['created_at']
        read_only_fields = fields


class UserIdentitySerializer(serializers.ModelSerializer):
    """Sender shape embedded in chat messages."""

    id = serializers.CharField(source='user_id', read_only=True)

    class Meta:
        model = User
        fields = ['id', 'name', 'email']
        read_only_fields = fields
