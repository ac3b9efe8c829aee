import logging
import time
from urllib.parse import parse_qs

from channels.middleware import BaseMiddleware
from django.conf import settings
from django.core.cache import cache

from notechat.jwt_utils import get_user_id_from_token

logger = logging.getLogger(__name__)

CLOSE_UNAUTHENTICATED = 4001
CLOSE_RATE_LIMITED = 4029


class WebSocketAuthMiddleware(BaseMiddleware):
    """
    Middleware for WebSocket authentication
    Rejects the handshake before the consumer runs unless the bearer token
    verifies, then puts the trusted user id on the scope
    """

    async def __call__(self, scope, receive, send):
        token = self.get_token(scope)

        if not token:
            logger.warning('WebSocket handshake without token rejected')
            await send({
                'type': 'websocket.close',
                'code': CLOSE_UNAUTHENTICATED,
                'reason': 'Authentication token required',
            })
            return

        user_id = get_user_id_from_token(token)
        if not user_id:
            await send({
                'type': 'websocket.close',
                'code': CLOSE_UNAUTHENTICATED,
                'reason': 'Invalid authentication token',
            })
            return

        if not await self.check_rate_limit(user_id):
            logger.warning('WebSocket handshake rate limit exceeded for %s', user_id)
            await send({
                'type': 'websocket.close',
                'code': CLOSE_RATE_LIMITED,
                'reason': 'Rate limit exceeded',
            })
            return

        scope = dict(scope, user_id=user_id, authenticated=True)
        return await super().__call__(scope, receive, send)

    def get_token(self, scope):
        """Token from the ``token`` query parameter, else the Authorization header"""
        query_params = parse_qs(scope.get('query_string', b'').decode())
        token = query_params.get('token', [None])[0]
        if token:
            return token

        for name, value in scope.get('headers', []):
            if name.lower() == b'authorization':
                parts = value.decode('latin1').split()
                if len(parts) == 2 and parts[0].lower() == 'bearer':
                    return parts[1]
        return None

    async def check_rate_limit(self, user_id):
        """Allow at most WEBSOCKET_RATE_LIMIT handshakes per user per minute"""
        cache_key = f'websocket_rate_limit:{user_id}'
        current_time = int(time.time())

        rate_data = await cache.aget(cache_key, {'count': 0, 'window_start': current_time})

        if current_time - rate_data['window_start'] >= 60:
            rate_data = {'count': 0, 'window_start': current_time}

        if rate_data['count'] >= settings.WEBSOCKET_RATE_LIMIT:
            return False

        rate_data['count'] += 1
        await cache.aset(cache_key, rate_data, 60)
        return True


class WebSocketSecurityMiddleware(BaseMiddleware):
    """
    Puts the frame size limit and heartbeat interval on the scope
    """

    async def __call__(self, scope, receive, send):
        scope = dict(
            scope,
            max_message_size=settings.WEBSOCKET_MAX_MESSAGE_SIZE,
            heartbeat_interval=settings.WEBSOCKET_HEARTBEAT_INTERVAL,
        )
        return await super().__call__(scope, receive, send)
