import json

from django.test import SimpleTestCase

from notechat.exceptions import InvalidInput
from websocket_chat import events


class ParseFrameTest(SimpleTestCase):
    def frame(self, event, data=None):
        return json.dumps({'event': event, 'data': data})

    def test_message_send(self):
        event, payload = events.parse_frame(
            self.frame(events.MESSAGE_SEND, {'conversationId': 'conv_1', 'content': ' hi '})
        )
        self.assertEqual(event, events.MESSAGE_SEND)
        self.assertEqual(payload['conversationId'], 'conv_1')
        self.assertEqual(payload['content'], ' hi ')

    def test_message_send_without_content_defers_to_service(self):
        _, payload = events.parse_frame(self.frame(events.MESSAGE_SEND, {'conversationId': 'conv_1'}))
        self.assertNotIn('content', payload)

    def test_conversation_ref_accepts_bare_string(self):
        _, payload = events.parse_frame(self.frame(events.CONVERSATION_JOIN, 'conv_1'))
        self.assertEqual(payload, {'conversationId': 'conv_1'})

    def test_heartbeat_without_data(self):
        event, payload = events.parse_frame(json.dumps({'event': 'heartbeat'}))
        self.assertEqual((event, payload), (events.HEARTBEAT, {}))

    def test_invalid_json(self):
        with self.assertRaisesMessage(InvalidInput, 'Invalid JSON format'):
            events.parse_frame('{not json')

    def test_non_object_frame(self):
        with self.assertRaises(InvalidInput):
            events.parse_frame('[1, 2]')

    def test_unknown_event(self):
        for frame in [self.frame('message:delete', {}), json.dumps({'event': 5}), '{}']:
            with self.assertRaisesMessage(InvalidInput, 'Unknown event type'):
                events.parse_frame(frame)

    def test_missing_conversation_id(self):
        with self.assertRaisesMessage(InvalidInput, 'conversationId'):
            events.parse_frame(self.frame(events.TYPING_START, {}))

    def test_conversation_id_with_invalid_characters(self):
        with self.assertRaises(InvalidInput):
            events.parse_frame(self.frame(events.MESSAGES_READ, {'conversationId': 'conv 1/..'}))

    def test_encode_frame(self):
        self.assertEqual(
            json.loads(events.encode_frame(events.ERROR, {'message': 'boom'})),
            {'event': 'error', 'data': {'message': 'boom'}},
        )
