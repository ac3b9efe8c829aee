from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from .serializers import FriendSerializer, FriendshipSerializer, PendingRequestSerializer
from .services import FriendshipService


class FriendListView(APIView):
    """List friends plus pending requests in both directions"""

    def get(self, request):
        overview = FriendshipService.overview(request.user)
        context = {'user_id': request.user.user_id}
        return Response({
            'friends': FriendSerializer(overview['friends'], many=True, context=context).data,
            'pending_received': PendingRequestSerializer(
                overview['pending_received'], many=True, context=context
            ).data,
            'pending_sent': PendingRequestSerializer(
                overview['pending_sent'], many=True, context=context
            ).data,
        })


class FriendRequestView(APIView):
    def post(self, request, user_id):
        """Send a friend request to ``user_id``"""
        friendship, created = FriendshipService.send_request(request.user, user_id)
        return Response(
            {'message': 'Friend request sent', 'friendship': FriendshipSerializer(friendship).data},
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )


class FriendRequestCancelView(APIView):
    def delete(self, request, friendship_id):
        """Cancel a pending request the caller sent"""
        FriendshipService.cancel(request.user, friendship_id)
        return Response({'message': 'Friend request cancelled'})


class FriendRequestAcceptView(APIView):
    def put(self, request, friendship_id):
        friendship = FriendshipService.accept(request.user, friendship_id)
        return Response({
            'message': 'Friend request accepted',
            'friendship': FriendshipSerializer(friendship).data,
        })


class FriendRequestDeclineView(APIView):
    def put(self, request, friendship_id):
        FriendshipService.decline(request.user, friendship_id)
        return Response({'message': 'Friend request declined'})


class FriendRemoveView(APIView):
    def delete(self, request, user_id):
        FriendshipService.remove(request.user, user_id)
        return Response({'message': 'Friend removed'})
