# apps/core/tests/test_views.py

import json

from django.test import TestCase
from django.urls import reverse

from ..models import Board, BoardInvitation, BoardMember, User


class AuthViewsTest(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.user = User.objects.create_user(username='ana', email='ana@example.com', password='password123')

    def test_login_page(self):
        response = self.client.get(reverse('core:login'))
        self.assertEqual(response.status_code, 200)
        self.assertTemplateUsed(response, 'core/login.html')

    def test_login_by_email(self):
        response = self.client.post(reverse('core:login'), {
            'identifier': 'ANA@example.com',
            'password': 'password123',
        })
        self.assertRedirects(response, reverse('core:dashboard'))

    def test_login_by_username(self):
        response = self.client.post(reverse('core:login'), {
            'identifier': 'ana',
            'password': 'password123',
        })
        self.assertRedirects(response, reverse('core:dashboard'))

    def test_login_wrong_password(self):
        response = self.client.post(reverse('core:login'), {
            'identifier': 'ana@example.com',
            'password': 'wrong-password',
        })
        self.assertEqual(response.status_code, 200)
        self.assertNotIn('_auth_user_id', self.client.session)

    def test_login_follows_safe_next(self):
        response = self.client.post(reverse('core:login') + '?next=/board/calendar/', {
            'identifier': 'ana',
            'password': 'password123',
        })
        self.assertEqual(response.status_code, 302)
        self.assertEqual(response['Location'], '/board/calendar/')

    def test_login_ignores_external_next(self):
        response = self.client.post(reverse('core:login') + '?next=https://evil.example.com/', {
            'identifier': 'ana',
            'password': 'password123',
        })
        self.assertEqual(response['Location'], reverse('core:dashboard'))

    def test_signup(self):
        response = self.client.post(reverse('core:signup'), {
            'name': 'Bia Souza',
            'email': 'bia@example.com',
            'password': 'password123',
            'confirm_password': 'password123',
        })
        self.assertRedirects(response, reverse('core:login'))
        self.assertTrue(User.objects.filter(email='bia@example.com').exists())

    def test_signup_password_mismatch(self):
        response = self.client.post(reverse('core:signup'), {
            'name': 'Bia',
            'email': 'bia@example.com',
            'password': 'password123',
            'confirm_password': 'password456',
        })
        self.assertEqual(response.status_code, 200)
        self.assertIn('confirm_password', response.context['form'].errors)
        self.assertFalse(User.objects.filter(email='bia@example.com').exists())

    def test_logout(self):
        self.client.force_login(self.user)
        response = self.client.get(reverse('core:logout'))
        self.assertRedirects(response, reverse('core:login'))
        self.assertNotIn('_auth_user_id', self.client.session)


class DashboardViewTest(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.user = User.objects.create_user(username='ana', email='ana@example.com', password='password123')
        cls.other = User.objects.create_user(username='bia', email='bia@example.com', password='password123')
        cls.alpha = Board.objects.create(title='alpha', owner=cls.user)
        cls.beta = Board.objects.create(title='Beta', owner=cls.user)
        cls.shared = Board.objects.create(title='Gamma shared', owner=cls.other)
        BoardMember.objects.create(board=cls.shared, user=cls.user)
        cls.private = Board.objects.create(title='Private', owner=cls.other)

    def setUp(self):
        self.client.force_login(self.user)

    def test_requires_login(self):
        self.client.logout()
        url = reverse('core:dashboard')
        response = self.client.get(url)
        self.assertRedirects(response, f"{reverse('core:login')}?next={url}")

    def test_owned_and_shared(self):
        response = self.client.get(reverse('core:dashboard'))

        self.assertEqual(response.status_code, 200)
        self.assertTemplateUsed(response, 'core/dashboard.html')
        self.assertEqual(response.context['owned_boards'], [self.beta, self.alpha])
        self.assertEqual(response.context['shared_boards'], [self.shared])

    def test_search_is_case_insensitive(self):
        response = self.client.get(reverse('core:dashboard'), {'q': 'BET'})
        self.assertEqual(response.context['owned_boards'], [self.beta])
        self.assertEqual(response.context['shared_boards'], [])

    def test_sort_by_title(self):
        response = self.client.get(reverse('core:dashboard'), {'sort': 'title-asc'})
        self.assertEqual(response.context['owned_boards'], [self.alpha, self.beta])

    def test_invalid_sort_falls_back(self):
        response = self.client.get(reverse('core:dashboard'), {'sort': 'bogus'})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.context['sort'], 'date-newest')

    def test_htmx_renders_grid_only(self):
        response = self.client.get(reverse('core:dashboard'), HTTP_HX_REQUEST='true')
        self.assertTemplateUsed(response, 'core/partials/board_grid.html')
        self.assertTemplateNotUsed(response, 'core/dashboard.html')

    def test_api_boards_shared_filter(self):
        response = self.client.get(reverse('core:api_boards'), {'filter': 'shared'})

        data = response.json()
        self.assertTrue(data['success'])
        self.assertEqual([b['id'] for b in data['boards']], [self.shared.id])
        self.assertFalse(data['boards'][0]['is_owner'])

    def test_api_boards_requires_auth(self):
        self.client.logout()
        response = self.client.get(reverse('core:api_boards'))
        self.assertEqual(response.status_code, 401)
        self.assertFalse(response.json()['success'])


class BoardViewsTest(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.owner = User.objects.create_user(username='owner', email='owner@example.com', password='password123')
        cls.member = User.objects.create_user(username='member', email='member@example.com', password='password123')
        cls.outsider = User.objects.create_user(username='outsider', email='out@example.com', password='password123')
        cls.board = Board.objects.create(title='Launch', owner=cls.owner)
        cls.membership = BoardMember.objects.create(board=cls.board, user=cls.member)

    def post_json(self, url, data):
        return self.client.post(url, json.dumps(data), content_type='application/json')

    def test_create_board(self):
        self.client.force_login(self.outsider)

        response = self.client.post(reverse('core:create_board'), {'title': '  Roadmap  '})

        board = Board.objects.get(title='Roadmap')
        self.assertRedirects(response, reverse('board:kanban', args=[board.id]))
        self.assertEqual(board.owner, self.outsider)
        self.assertEqual(board.lists.count(), 3)

    def test_create_board_without_title(self):
        self.client.force_login(self.outsider)

        response = self.client.post(reverse('core:create_board'), {'title': '   '})

        self.assertRedirects(response, reverse('core:dashboard'))
        self.assertFalse(Board.objects.filter(owner=self.outsider).exists())

    def test_member_updates_board(self):
        self.client.force_login(self.member)

        response = self.post_json(reverse('core:update_board', args=[self.board.id]), {'title': 'Launch v2'})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['board']['title'], 'Launch v2')

    def test_outsider_cannot_update_board(self):
        self.client.force_login(self.outsider)

        response = self.post_json(reverse('core:update_board', args=[self.board.id]), {'title': 'Hacked'})

        self.assertEqual(response.status_code, 403)
        self.board.refresh_from_db()
        self.assertEqual(self.board.title, 'Launch')

    def test_update_missing_board(self):
        self.client.force_login(self.owner)
        response = self.post_json(reverse('core:update_board', args=[9999]), {'title': 'x'})
        self.assertEqual(response.status_code, 404)

    def test_update_with_malformed_json(self):
        self.client.force_login(self.owner)
        response = self.client.post(
            reverse('core:update_board', args=[self.board.id]), '{oops', content_type='application/json'
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['error'], 'Invalid JSON')

    def test_member_cannot_delete_board(self):
        self.client.force_login(self.member)

        response = self.client.post(reverse('core:delete_board', args=[self.board.id]))

        self.assertRedirects(response, reverse('core:dashboard'))
        self.assertTrue(Board.objects.filter(id=self.board.id).exists())

    def test_owner_deletes_board(self):
        self.client.force_login(self.owner)

        response = self.client.post(reverse('core:delete_board', args=[self.board.id]))

        self.assertRedirects(response, reverse('core:dashboard'))
        self.assertFalse(Board.objects.filter(id=self.board.id).exists())

    def test_members_list(self):
        self.client.force_login(self.member)

        response = self.client.get(reverse('core:board_members', args=[self.board.id]))

        data = response.json()
        self.assertEqual(len(data['members']), 2)
        self.assertFalse(data['is_owner'])
        self.assertEqual(data['role'], 'MEMBER')

    def test_owner_invites(self):
        self.client.force_login(self.owner)

        response = self.post_json(reverse('core:invite_member', args=[self.board.id]), {'email': 'new@example.com'})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['invitation']['email'], 'new@example.com')

    def test_member_cannot_invite(self):
        self.client.force_login(self.member)

        response = self.post_json(reverse('core:invite_member', args=[self.board.id]), {'email': 'new@example.com'})

        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json()['error'], 'Only the owner can do this')

    def test_invite_invalid_email(self):
        self.client.force_login(self.owner)
        response = self.post_json(reverse('core:invite_member', args=[self.board.id]), {'email': 'nope'})
        self.assertEqual(response.status_code, 400)

    def test_remove_member(self):
        self.client.force_login(self.owner)

        response = self.client.post(reverse('core:remove_member', args=[self.board.id, self.membership.id]))

        self.assertEqual(response.status_code, 200)
        self.assertFalse(BoardMember.objects.filter(id=self.membership.id).exists())

    def test_remove_unknown_member(self):
        self.client.force_login(self.owner)
        response = self.client.post(reverse('core:remove_member', args=[self.board.id, 9999]))
        self.assertEqual(response.status_code, 404)

    def test_accept_invitation_view(self):
        invitation = BoardInvitation.objects.create(email='out@example.com', board=self.board, inviter=self.owner)
        self.client.force_login(self.outsider)

        response = self.client.post(reverse('core:accept_invitation', args=[invitation.id]))

        self.assertRedirects(response, reverse('board:kanban', args=[self.board.id]))
        self.assertTrue(BoardMember.objects.filter(board=self.board, user=self.outsider).exists())

    def test_pending_invitations_api(self):
        BoardInvitation.objects.create(email='out@example.com', board=self.board, inviter=self.owner)
        self.client.force_login(self.outsider)

        response = self.client.get(reverse('core:api_invitations'))

        invitations = response.json()['invitations']
        self.assertEqual(len(invitations), 1)
        self.assertEqual(invitations[0]['board_title'], 'Launch')


class HealthCheckTest(TestCase):

    def test_healthy(self):
        response = self.client.get(reverse('core:health'))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['status'], 'healthy')
