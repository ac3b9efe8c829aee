from django.db import IntegrityError
from django.test import TestCase

from conversations.models import Conversation, ConversationMessage, pair_key_for

from . import make_user


class ConversationModelTest(TestCase):
    def setUp(self):
        self.alice = make_user('alice')
        self.bob = make_user('bob')
        self.conversation = Conversation.objects.create(
            type=Conversation.TYPE_PERSONAL, pair_key=pair_key_for('alice', 'bob')
        )
        self.conversation.participants.add(self.alice, self.bob)

    def test_conversation_creation(self):
        """Test that a conversation gets a public id and timestamps"""
        self.assertTrue(self.conversation.conversation_id.startswith('conv_'))
        self.assertIsNotNone(self.conversation.created_at)
        self.assertFalse(self.conversation.is_group)
        self.assertIsNone(self.conversation.last_message)

    def test_conversation_str_representation(self):
        self.assertEqual(
            str(self.conversation), f'Conversation {self.conversation.conversation_id}'
        )

    def test_pair_key_is_order_independent(self):
        self.assertEqual(pair_key_for('bob', 'alice'), pair_key_for('alice', 'bob'))

    def test_duplicate_pair_key_is_rejected(self):
        with self.assertRaises(IntegrityError):
            Conversation.objects.create(
                type=Conversation.TYPE_PERSONAL, pair_key=pair_key_for('bob', 'alice')
            )

    def test_last_message_snapshot(self):
        message = ConversationMessage.objects.create(
            conversation=self.conversation, sender=self.alice, content='Hi'
        )
        self.conversation.last_message_content = 'Hi'
        self.conversation.last_message_sender = self.alice
        self.conversation.last_message_at = message.created_at
        self.conversation.save()

        self.assertEqual(
            self.conversation.last_message,
            {'content': 'Hi', 'sender': 'alice', 'created_at': message.created_at},
        )

    def test_deleting_conversation_deletes_messages(self):
        ConversationMessage.objects.create(
            conversation=self.conversation, sender=self.alice, content='Hi'
        )
        self.conversation.delete()
        self.assertFalse(ConversationMessage.objects.exists())


class ConversationMessageModelTest(TestCase):
    def setUp(self):
        self.alice = make_user('alice')
        self.conversation = Conversation.objects.create(
            type=Conversation.TYPE_GROUP, name='Team', admin=self.alice
        )

    def test_message_str_representation(self):
        message = ConversationMessage.objects.create(
            conversation=self.conversation, sender=self.alice, content='Hello there'
        )
        self.assertEqual(str(message), 'alice: Hello there...')

    def test_messages_are_ordered_oldest_first(self):
        first = ConversationMessage.objects.create(
            conversation=self.conversation, sender=self.alice, content='one'
        )
        second = ConversationMessage.objects.create(
            conversation=self.conversation, sender=self.alice, content='two'
        )
        self.assertEqual(list(self.conversation.messages.all()), [first, second])
