import math

from django.conf import settings
from django.db.models import Q
from rest_framework.response import Response
from rest_framework.views import APIView

from friends.services import connected_user_ids
from notechat.exceptions import NotFound
from notechat.pagination import parse_page_params

from .models import User
from .serializers import UserProfileSerializer, UserSummarySerializer


class UserBrowseView(APIView):
    """Browse users the caller is not yet connected to"""

    def get(self, request):
        """
        Return users other than the caller and anyone they already have a
        pending or accepted friendship with, ordered by name.

        Query parameters:
            search: optional case-insensitive substring of name or email
            page, limit: 1-based page number and page size
        """
        page, limit = parse_page_params(request.GET, settings.USERS_PAGE_SIZE)
        user_id = request.user.user_id

        excluded = connected_user_ids(user_id)
        excluded.add(user_id)
        users = User.objects.exclude(user_id__in=excluded)

        search = request.GET.get('search', '').strip()
        if search:
            users = users.filter(Q(name__icontains=search) | Q(email__icontains=search))

        users = users.order_by('name')
        total = users.count()
        offset = (page - 1) * limit

        return Response({
            'users': UserSummarySerializer(users[offset:offset + limit], many=True).data,
            'pagination': {
                'page': page,
                'limit': limit,
                'total': total,
                'pages': math.ceil(total / limit),
            },
        })


class UserRetrieveView(APIView):
    """Retrieves a user specified by ID"""

    def get(self, request, user_id):
        user = User.objects.filter(user_id=user_id).first()
        if user is None:
            raise NotFound('User not found')
        return Response(UserProfileSerializer(user).data)
