from django.urls import path

from .views import UserBrowseView, UserRetrieveView

app_name = 'users'

urlpatterns = [
    path('', UserBrowseView.as_view(), name='user-browse'),
    path('<str:user_id>/', UserRetrieveView.as_view(), name='user-detail'),
]
