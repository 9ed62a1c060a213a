# apps/reports/tests/test_views.py

from datetime import timedelta

from django.test import TestCase
from django.urls import reverse
from django.utils import timezone

from apps.core.models import Board, BoardMember, Card, Subtask, User

from ..utils import build_board_summary, export_filename


class ReportsTestMixin:

    @classmethod
    def setUpTestData(cls):
        cls.owner = User.objects.create_user(username='owner', email='owner@example.com', password='password123')
        cls.member = User.objects.create_user(username='member', email='member@example.com', password='password123')
        cls.outsider = User.objects.create_user(username='outsider', email='out@example.com', password='password123')
        cls.board = Board.objects.create(title='Launch Plan', owner=cls.owner)
        BoardMember.objects.create(board=cls.board, user=cls.member)

        todo, doing, _ = cls.board.lists.order_by('order')
        today = timezone.localdate()
        cls.late = Card.objects.create(
            content='Late, "quoted" card', task_list=todo, priority=Card.PRIORITY_HIGH,
            deadline=today - timedelta(days=2), order=0,
        )
        Card.objects.create(content='Due today', task_list=todo, deadline=today, order=1)
        working = Card.objects.create(content='Working', task_list=doing, priority=Card.PRIORITY_MEDIUM)
        Subtask.objects.create(card=working, content='a', completed=True, order=0)
        Subtask.objects.create(card=working, content='b', order=1)


class BoardSummaryTest(ReportsTestMixin, TestCase):

    def test_summary(self):
        summary = build_board_summary(self.board)

        self.assertEqual(summary['total_cards'], 3)
        self.assertEqual([(l['title'], l['cards']) for l in summary['lists']], [('To-Do', 2), ('Doing', 1), ('Done', 0)])
        self.assertEqual(summary['priorities'], {'LOW': 1, 'MEDIUM': 1, 'HIGH': 1})
        self.assertEqual(summary['overdue'], 1)
        self.assertEqual(summary['due_today'], 1)
        self.assertEqual(summary['members'], 2)
        self.assertEqual(summary['subtasks'], {'total': 2, 'done': 1, 'progress': 50})

    def test_export_filename(self):
        self.assertEqual(export_filename(self.board, 'csv'), f'board_{self.board.id}_launch-plan.csv')


class ExportViewsTest(ReportsTestMixin, TestCase):

    def setUp(self):
        self.client.force_login(self.member)

    def test_csv(self):
        response = self.client.get(reverse('reports:board_csv', args=[self.board.id]))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response['Content-Type'], 'text/csv; charset=utf-8')
        self.assertIn('attachment;', response['Content-Disposition'])

        lines = response.content.decode('utf-8-sig').splitlines()
        self.assertTrue(lines[0].startswith('ID,Card,Description,List'))
        self.assertEqual(len(lines), 4)
        self.assertIn('"Late, ""quoted"" card"', lines[1])
        self.assertIn('1/2', lines[3])

    def test_excel(self):
        response = self.client.get(reverse('reports:board_excel', args=[self.board.id]))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            response['Content-Type'],
            'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'
        )
        # xlsx files are zip archives
        self.assertTrue(response.content.startswith(b'PK'))

    def test_pdf(self):
        response = self.client.get(reverse('reports:board_pdf', args=[self.board.id]))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response['Content-Type'], 'application/pdf')
        self.assertTrue(response.content.startswith(b'%PDF'))

    def test_outsider_redirected(self):
        self.client.force_login(self.outsider)

        for name in ('reports:board_csv', 'reports:board_excel', 'reports:board_pdf'):
            with self.subTest(name=name):
                response = self.client.get(reverse(name, args=[self.board.id]))
                self.assertRedirects(response, reverse('core:dashboard'))

    def test_summary_api(self):
        response = self.client.get(reverse('reports:api_board_summary', args=[self.board.id]))

        data = response.json()
        self.assertTrue(data['success'])
        self.assertEqual(data['summary']['total_cards'], 3)

    def test_summary_api_outsider(self):
        self.client.force_login(self.outsider)
        response = self.client.get(reverse('reports:api_board_summary', args=[self.board.id]))
        self.assertEqual(response.status_code, 403)
