from django.contrib import admin

from .models import Friendship


@admin.register(Friendship)
class FriendshipAdmin(admin.ModelAdmin):
    list_display = ['id', 'requester', 'recipient', 'status', 'created_at', 'updated_at']
    list_filter = ['status', 'created_at']
    search_fields = ['requester__name', 'recipient__name', 'requester__email', 'recipient__email']
    readonly_fields = ['created_at', 'updated_at']
