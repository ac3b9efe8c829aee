"""
URL configuration for the notechat project.

The WebSocket gateway is routed separately in websocket_chat.routing.
"""
from django.contrib import admin
from django.urls import include, path

from . import views

urlpatterns = [
    path('admin/', admin.site.urls),
    path('ping/', views.PingView.as_view(), name='ping'),
    path('users/', include('users.urls')),
    path('friends/', include('friends.urls')),
    path('conversations/', include('conversations.urls')),
    path('messages/', include('websocket_chat.urls')),
]
