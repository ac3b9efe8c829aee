from friends.models import Friendship
from users.models import User


def make_user(user_id):
    return User.objects.create(
        user_id=user_id, name=user_id.capitalize(), email=f'{user_id}@example.com'
    )


def befriend(user_a, user_b):
    return Friendship.objects.create(
        requester_id=user_a, recipient_id=user_b, status=Friendship.STATUS_ACCEPTED
    )
