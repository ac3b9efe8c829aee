from django.contrib import admin

from .models import Conversation, ConversationMessage


@admin.register(Conversation)
class ConversationAdmin(admin.ModelAdmin):
    list_display = ['conversation_id', 'type', 'name', 'admin', 'created_at', 'updated_at', 'last_message_at']
    list_filter = ['type', 'created_at', 'updated_at']
    search_fields = ['conversation_id', 'name']
    readonly_fields = ['conversation_id', 'pair_key', 'created_at', 'updated_at']
    filter_horizontal = ['participants']


@admin.register(ConversationMessage)
class ConversationMessageAdmin(admin.ModelAdmin):
    list_display = ['id', 'conversation', 'sender', 'content_preview', 'created_at']
    list_filter = ['created_at']
    search_fields = ['content', 'sender__name', 'conversation__conversation_id']
    readonly_fields = ['created_at']

    @admin.display(description='Content Preview')
    def content_preview(self, obj):
        return obj.content[:50] + '...' if len(obj.content) > 50 else obj.content
