import asyncio
import logging
import time

from channels.db import database_sync_to_async
from channels.generic.websocket import AsyncWebsocketConsumer
from django.conf import settings
from django.utils import timezone

from conversations.serializers import ConversationMessageSerializer
from conversations.services import ConversationService
from notechat.exceptions import ChatError, Unexpected
from users.models import User

from . import events
from .middleware import CLOSE_UNAUTHENTICATED
from .presence import registry

logger = logging.getLogger(__name__)

PRESENCE_GROUP = 'presence'
CLOSE_SERVER_ERROR = 1011


def conversation_group(conversation_id):
    return f'conversation_{conversation_id}'


def user_group(user_id):
    return f'user_{user_id}'


class ChatConsumer(AsyncWebsocketConsumer):
    """
    WebSocket gateway for conversations and presence.

    One instance per connection. The handshake has already been
    authenticated by WebSocketAuthMiddleware; on connect the user is marked
    online and joined to a private channel plus one channel per conversation
    they belong to. Inbound events are handled one at a time; a failed event
    is answered with a private ``error`` frame and never closes the socket.
    """

    presence = registry

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.user = None
        self.user_id = None
        self.joined_groups = set()
        self.heartbeat_task = None
        self.handlers = {
            events.CONVERSATION_JOIN: self.handle_conversation_join,
            events.CONVERSATION_LEAVE: self.handle_conversation_leave,
            events.MESSAGE_SEND: self.handle_message_send,
            events.TYPING_START: self.handle_typing_start,
            events.TYPING_STOP: self.handle_typing_stop,
            events.MESSAGES_READ: self.handle_messages_read,
            events.HEARTBEAT: self.handle_heartbeat,
        }

    async def connect(self):
        """Accept an authenticated connection, mark the user online and join rooms"""
        user_id = self.scope.get('user_id')
        if not user_id:
            await self.close(code=CLOSE_UNAUTHENTICATED)
            return

        self.user = await self.get_user(user_id)
        if self.user is None:
            logger.warning('WebSocket handshake for unknown user %s rejected', user_id)
            await self.close(code=CLOSE_UNAUTHENTICATED)
            return

        self.user_id = self.user.user_id
        await self.accept()

        self.presence.register(self.user_id, self.channel_name)
        try:
            await self.set_online()

            await self.join_group(user_group(self.user_id))
            for conversation_id in await self.get_conversation_ids():
                await self.join_group(conversation_group(conversation_id))
            await self.join_group(PRESENCE_GROUP)
        except Exception:
            logger.exception('Connect failed for %s, closing', self.user_id)
            self.presence.unregister(self.user_id, self.channel_name)
            for group in list(self.joined_groups):
                await self.leave_group(group)
            await self.close(code=CLOSE_SERVER_ERROR)
            return

        await self.channel_layer.group_send(PRESENCE_GROUP, {
            'type': 'presence.update',
            'event': events.USER_ONLINE,
            'user_id': self.user_id,
        })

        interval = self.scope.get('heartbeat_interval', settings.WEBSOCKET_HEARTBEAT_INTERVAL)
        if interval:
            self.heartbeat_task = asyncio.create_task(self.heartbeat_loop(interval))

        logger.info('User connected: %s (%s)', self.user_id, self.channel_name)

    async def disconnect(self, code):
        """Mark the user offline and leave every channel"""
        if self.heartbeat_task:
            self.heartbeat_task.cancel()

        if self.user_id is None:
            return

        if self.presence.unregister(self.user_id, self.channel_name):
            await self.set_offline()
            await self.channel_layer.group_send(PRESENCE_GROUP, {
                'type': 'presence.update',
                'event': events.USER_OFFLINE,
                'user_id': self.user_id,
            })

        for group in list(self.joined_groups):
            await self.leave_group(group)

        logger.info('User disconnected: %s (code %s)', self.user_id, code)

    async def receive(self, text_data=None, bytes_data=None):
        """Validate one inbound frame and dispatch it"""
        if text_data is None:
            await self.send_error('Binary frames are not supported')
            return

        max_size = self.scope.get('max_message_size', settings.WEBSOCKET_MAX_MESSAGE_SIZE)
        if len(text_data.encode()) > max_size:
            await self.send_error('Message too large')
            return

        try:
            event, payload = events.parse_frame(text_data)
            await self.handlers[event](payload)
        except ChatError as e:
            await self.send_error(e.message)
        except Exception:
            logger.exception('Error handling WebSocket event from %s', self.user_id)
            await self.send_error(Unexpected.default_detail)

    # Inbound handlers

    async def handle_conversation_join(self, payload):
        await self.join_group(conversation_group(payload['conversationId']))

    async def handle_conversation_leave(self, payload):
        await self.leave_group(conversation_group(payload['conversationId']))

    async def handle_message_send(self, payload):
        conversation_id = payload['conversationId']
        message = await self.save_message(conversation_id, payload.get('content'))

        # The sender is a verified participant, so make sure the echo reaches them.
        group = conversation_group(conversation_id)
        await self.join_group(group)
        await self.channel_layer.group_send(group, {
            'type': 'chat.message',
            'message': message,
            'conversation_id': conversation_id,
        })

    async def handle_typing_start(self, payload):
        await self.relay_typing(payload['conversationId'], True)

    async def handle_typing_stop(self, payload):
        await self.relay_typing(payload['conversationId'], False)

    async def relay_typing(self, conversation_id, is_typing):
        await self.channel_layer.group_send(conversation_group(conversation_id), {
            'type': 'typing.update',
            'user_id': self.user_id,
            'conversation_id': conversation_id,
            'is_typing': is_typing,
            'sender_channel': self.channel_name,
        })

    async def handle_messages_read(self, payload):
        conversation_id = payload['conversationId']
        await self.mark_read(conversation_id)
        await self.channel_layer.group_send(conversation_group(conversation_id), {
            'type': 'read.update',
            'user_id': self.user_id,
            'conversation_id': conversation_id,
        })

    async def handle_heartbeat(self, payload):
        await self.send_event(events.HEARTBEAT_ACK, {'timestamp': time.time()})

    # Channel layer handlers

    async def chat_message(self, event):
        await self.send_event(events.MESSAGE_RECEIVE, {
            'message': event['message'],
            'conversationId': event['conversation_id'],
        })

    async def typing_update(self, event):
        if event['sender_channel'] == self.channel_name:
            return
        await self.send_event(events.TYPING_UPDATE, {
            'userId': event['user_id'],
            'conversationId': event['conversation_id'],
            'isTyping': event['is_typing'],
        })

    async def read_update(self, event):
        await self.send_event(events.MESSAGES_READ_UPDATE, {
            'conversationId': event['conversation_id'],
            'userId': event['user_id'],
        })

    async def presence_update(self, event):
        if event['user_id'] == self.user_id:
            return
        await self.send_event(event['event'], {'userId': event['user_id']})

    # Helpers

    async def join_group(self, group):
        if group in self.joined_groups:
            return
        await self.channel_layer.group_add(group, self.channel_name)
        self.joined_groups.add(group)

    async def leave_group(self, group):
        if group not in self.joined_groups:
            return
        await self.channel_layer.group_discard(group, self.channel_name)
        self.joined_groups.discard(group)

    async def send_event(self, event, data):
        await self.send(text_data=events.encode_frame(event, data))

    async def send_error(self, message):
        """Send an error to this connection only"""
        await self.send_event(events.ERROR, {'message': message})

    async def heartbeat_loop(self, interval):
        """Send periodic heartbeat to keep connection alive"""
        while True:
            try:
                await asyncio.sleep(interval)
                await self.send_event(events.HEARTBEAT, {'timestamp': time.time()})
            except asyncio.CancelledError:
                break
            except Exception:
                logger.warning('Heartbeat to %s failed, stopping', self.user_id)
                break

    # Store access

    @database_sync_to_async
    def get_user(self, user_id):
        return User.objects.filter(user_id=user_id).first()

    @database_sync_to_async
    def set_online(self):
        User.objects.filter(user_id=self.user_id).update(is_online=True)

    @database_sync_to_async
    def set_offline(self):
        User.objects.filter(user_id=self.user_id).update(
            is_online=False, last_seen=timezone.now()
        )

    @database_sync_to_async
    def get_conversation_ids(self):
        return ConversationService.conversation_ids_for_user(self.user_id)

    @database_sync_to_async
    def save_message(self, conversation_id, content):
        """Persist a message and return its broadcast representation"""
        message = ConversationService.send_message(self.user, conversation_id, content)
        return dict(ConversationMessageSerializer(message).data)

    @database_sync_to_async
    def mark_read(self, conversation_id):
        return ConversationService.mark_read(self.user, conversation_id)
