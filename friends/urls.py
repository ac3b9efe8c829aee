from django.urls import path

from . import views

app_name = 'friends'

urlpatterns = [
    path('', views.FriendListView.as_view(), name='friend-list'),
    path('request/<str:user_id>/', views.FriendRequestView.as_view(), name='friend-request'),
    path(
        'request/<int:friendship_id>/cancel/',
        views.FriendRequestCancelView.as_view(),
        name='friend-request-cancel',
    ),
    path(
        'accept/<int:friendship_id>/',
        views.FriendRequestAcceptView.as_view(),
        name='friend-accept',
    ),
    path(
        'decline/<int:friendship_id>/',
        views.FriendRequestDeclineView.as_view(),
        name='friend-decline',
    ),
    path('<str:user_id>/', views.FriendRemoveView.as_view(), name='friend-remove'),
]
