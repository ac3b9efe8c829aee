from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from conversations.models import Conversation
from conversations.services import ConversationService
from notechat.jwt_utils import generate_test_token

from . import befriend, make_user


class ConversationEndpointsTest(APITestCase):
    def setUp(self):
        self.alice = make_user('alice')
        self.bob = make_user('bob')
        self.carol = make_user('carol')
        befriend('alice', 'bob')
        befriend('carol', 'alice')
        self.authenticate('alice')
        self.list_url = reverse('conversations:conversation-list')

    def authenticate(self, user_id):
        self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {generate_test_token(user_id)}')

    def detail_url(self, conversation_id):
        return reverse('conversations:conversation-detail', kwargs={'conversation_id': conversation_id})

    def test_create_personal_conversation(self):
        response = self.client.post(
            self.list_url, {'type': 'personal', 'participant_ids': ['bob']}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['type'], 'personal')
        self.assertEqual({p['id'] for p in response.data['participants']}, {'alice', 'bob'})

        self.authenticate('bob')
        again = self.client.post(
            self.list_url, {'type': 'personal', 'participant_ids': ['alice', 'bob']}, format='json'
        )
        self.assertEqual(again.status_code, status.HTTP_200_OK)
        self.assertEqual(again.data['conversation_id'], response.data['conversation_id'])

    def test_create_personal_with_wrong_participant_count(self):
        response = self.client.post(
            self.list_url, {'type': 'personal', 'participant_ids': ['bob', 'carol']}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data, {'error': 'Personal chat requires exactly 2 participants'})

    def test_create_personal_with_non_friend(self):
        make_user('dave')
        response = self.client.post(
            self.list_url, {'type': 'personal', 'participant_ids': ['dave']}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data, {'error': 'Can only chat with friends'})

    def test_create_group(self):
        response = self.client.post(
            self.list_url,
            {'type': 'group', 'participant_ids': ['bob', 'carol'], 'name': 'Trio'},
            format='json',
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['name'], 'Trio')
        self.assertEqual(response.data['admin']['id'], 'alice')
        self.assertEqual(len(response.data['participants']), 3)

    def test_create_rejects_unknown_type(self):
        response = self.client.post(
            self.list_url, {'type': 'channel', 'participant_ids': ['bob']}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('error', response.data)

    def test_list_includes_unread_count_and_last_message(self):
        conversation, _ = ConversationService.create_personal(self.alice, 'bob')
        ConversationService.send_message(self.bob, conversation.conversation_id, 'ping')

        response = self.client.get(self.list_url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['unread_count'], 1)
        self.assertEqual(response.data[0]['last_message']['content'], 'ping')
        self.assertEqual(response.data[0]['last_message']['sender'], 'bob')

    def test_detail_returns_page_of_messages(self):
        conversation, _ = ConversationService.create_personal(self.alice, 'bob')
        for i in range(3):
            ConversationService.send_message(self.bob, conversation.conversation_id, f'm{i}')

        response = self.client.get(self.detail_url(conversation.conversation_id), {'limit': 2})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([m['content'] for m in response.data['messages']], ['m1', 'm2'])
        self.assertEqual(response.data['messages'][0]['sender']['id'], 'bob')
        self.assertEqual(response.data['pagination']['total'], 3)
        self.assertTrue(response.data['pagination']['has_more'])

    def test_detail_hidden_from_non_participant(self):
        conversation, _ = ConversationService.create_personal(self.alice, 'bob')
        self.authenticate('carol')
        response = self.client.get(self.detail_url(conversation.conversation_id))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data, {'error': 'Conversation not found'})

    def test_leave_personal_conversation(self):
        conversation, _ = ConversationService.create_personal(self.alice, 'bob')
        response = self.client.delete(self.detail_url(conversation.conversation_id))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['deleted'])
        self.assertFalse(Conversation.objects.exists())

    def test_membership_and_rename(self):
        group = ConversationService.create_group(self.alice, ['bob'], 'Duo')
        members_url = reverse('conversations:conversation-members', kwargs={'conversation_id': group.conversation_id})
        rename_url = reverse('conversations:conversation-rename', kwargs={'conversation_id': group.conversation_id})

        response = self.client.put(members_url, {'action': 'add', 'member_ids': ['carol']}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['participants']), 3)

        response = self.client.put(members_url, {'action': 'remove', 'member_ids': ['bob']}, format='json')
        self.assertEqual({p['id'] for p in response.data['participants']}, {'alice', 'carol'})

        response = self.client.put(rename_url, {'name': 'Renamed'}, format='json')
        self.assertEqual(response.data['name'], 'Renamed')

    def test_membership_by_non_admin(self):
        group = ConversationService.create_group(self.alice, ['bob'], 'Duo')
        self.authenticate('bob')
        url = reverse('conversations:conversation-members', kwargs={'conversation_id': group.conversation_id})
        response = self.client.put(url, {'action': 'add', 'member_ids': ['carol']}, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data, {'error': 'Group not found or not admin'})

    def test_membership_rejects_unknown_action(self):
        group = ConversationService.create_group(self.alice, ['bob'], 'Duo')
        url = reverse('conversations:conversation-members', kwargs={'conversation_id': group.conversation_id})
        response = self.client.put(url, {'action': 'promote', 'member_ids': ['bob']}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
