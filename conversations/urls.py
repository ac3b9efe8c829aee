from django.urls import path

from . import views

app_name = 'conversations'

urlpatterns = [
    path('', views.ConversationListView.as_view(), name='conversation-list'),
    path('<str:conversation_id>/members/', views.ConversationMembersView.as_view(), name='conversation-members'),
    path('<str:conversation_id>/name/', views.ConversationRenameView.as_view(), name='conversation-rename'),
    path('<str:conversation_id>/', views.ConversationDetailView.as_view(), name='conversation-detail'),
]
