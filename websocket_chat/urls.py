from django.urls import path

from . import views

app_name = 'websocket_chat'

urlpatterns = [
    path('', views.MessageCreateView.as_view(), name='message-create'),
    path('read/<str:conversation_id>/', views.MarkMessagesAsReadView.as_view(), name='messages-read'),
    path('<str:conversation_id>/', views.ConversationMessagesHistoryView.as_view(), name='message-history'),
]
