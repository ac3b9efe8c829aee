from django.contrib import admin

from .models import User


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = (
        'user_id',
        'name',
        'email',
        'is_online',
        'last_seen',
        'created_at',
    )
    list_filter = ('is_online',)
    search_fields = ('user_id', 'name', 'email')
