# apps/board/tests/test_board_service.py

from datetime import date, timedelta

from django.test import TestCase
from django.utils import timezone

from apps.core.models import Board, BoardMember, Card, Subtask, User

from ..board_service import board_service, parse_ids


class BoardServiceTestMixin:

    @classmethod
    def setUpTestData(cls):
        cls.owner = User.objects.create_user(username='owner', email='owner@example.com', password='password123')
        cls.board = Board.objects.create(title='Launch', owner=cls.owner)
        cls.todo, cls.doing, cls.done = cls.board.lists.order_by('order')

    def make_cards(self, task_list, *contents):
        return [
            Card.objects.create(content=content, task_list=task_list, order=idx)
            for idx, content in enumerate(contents)
        ]

    def contents(self, task_list):
        return list(task_list.cards.order_by('order').values_list('content', flat=True))

    def orders(self, task_list):
        return list(task_list.cards.order_by('order').values_list('order', flat=True))


class BoardDataTest(BoardServiceTestMixin, TestCase):

    def test_board_data_nests_lists_cards_and_subtasks(self):
        card = Card.objects.create(content='Write docs', task_list=self.doing)
        Subtask.objects.create(card=card, content='Outline', completed=True)

        data = board_service.get_board_data(self.board)

        self.assertEqual([l['title'] for l in data['lists']], ['To-Do', 'Doing', 'Done'])
        doing = data['lists'][1]
        self.assertEqual(doing['cards'][0]['content'], 'Write docs')
        self.assertEqual(doing['cards'][0]['progress'], 100)
        self.assertEqual(doing['cards'][0]['subtasks'][0]['content'], 'Outline')

    def test_empty_board_gets_default_lists(self):
        self.board.lists.all().delete()

        data = board_service.get_board_data(self.board)

        self.assertEqual([l['title'] for l in data['lists']], ['To-Do', 'Doing', 'Done'])
        self.assertEqual([l['order'] for l in data['lists']], [0, 1, 2])


class ListOperationsTest(BoardServiceTestMixin, TestCase):

    def test_create_list_appends(self):
        success, _, task_list = board_service.create_list(self.board, '  Review  ')

        self.assertTrue(success)
        self.assertEqual(task_list.title, 'Review')
        self.assertEqual(task_list.order, 3)

    def test_create_list_requires_title(self):
        success, message, task_list = board_service.create_list(self.board, '   ')
        self.assertFalse(success)
        self.assertIsNone(task_list)

    def test_rename_list(self):
        success, _, task_list = board_service.rename_list(self.todo, 'Backlog')
        self.assertTrue(success)
        self.todo.refresh_from_db()
        self.assertEqual(self.todo.title, 'Backlog')

    def test_delete_list_renumbers(self):
        Card.objects.create(content='gone', task_list=self.doing)

        board_service.delete_list(self.doing)

        lists = list(self.board.lists.order_by('order').values_list('title', 'order'))
        self.assertEqual(lists, [('To-Do', 0), ('Done', 1)])
        self.assertFalse(Card.objects.filter(content='gone').exists())

    def test_reorder_lists(self):
        success, _, _ = board_service.reorder_lists(self.board, [self.done.id, self.todo.id, self.doing.id])

        self.assertTrue(success)
        titles = list(self.board.lists.order_by('order').values_list('title', flat=True))
        self.assertEqual(titles, ['Done', 'To-Do', 'Doing'])

    def test_reorder_lists_requires_exact_set(self):
        for ids in ([self.todo.id, self.doing.id], [self.todo.id, self.todo.id, self.done.id]):
            with self.subTest(ids=ids):
                success, _, _ = board_service.reorder_lists(self.board, ids)
                self.assertFalse(success)

        titles = list(self.board.lists.order_by('order').values_list('title', flat=True))
        self.assertEqual(titles, ['To-Do', 'Doing', 'Done'])


class CardOperationsTest(BoardServiceTestMixin, TestCase):

    def test_create_card_appends(self):
        self.make_cards(self.todo, 'a', 'b')

        success, _, card = board_service.create_card(self.todo, 'c', 'high', user=self.owner)

        self.assertTrue(success)
        self.assertEqual(card.order, 2)
        self.assertEqual(card.priority, Card.PRIORITY_HIGH)
        self.assertEqual(card.created_by, self.owner)

    def test_create_card_defaults_to_low(self):
        _, _, card = board_service.create_card(self.todo, 'task')
        self.assertEqual(card.priority, Card.PRIORITY_LOW)

    def test_create_card_validation(self):
        success, message, _ = board_service.create_card(self.todo, '')
        self.assertFalse(success)

        success, message, _ = board_service.create_card(self.todo, 'task', 'urgent')
        self.assertFalse(success)
        self.assertEqual(message, 'Invalid priority')

    def test_update_card_partial(self):
        card, = self.make_cards(self.todo, 'task')

        success, _, card = board_service.update_card(card, {'deadline': '2030-05-01', 'priority': 'Medium'})

        self.assertTrue(success)
        card.refresh_from_db()
        self.assertEqual(card.deadline, date(2030, 5, 1))
        self.assertEqual(card.priority, Card.PRIORITY_MEDIUM)
        self.assertEqual(card.content, 'task')

    def test_update_card_clears_deadline(self):
        card = Card.objects.create(content='task', task_list=self.todo, deadline=date(2030, 1, 1))

        board_service.update_card(card, {'deadline': ''})

        card.refresh_from_db()
        self.assertIsNone(card.deadline)

    def test_update_card_rejects_bad_values(self):
        card, = self.make_cards(self.todo, 'task')

        for data in ({'content': '  '}, {'deadline': 'tomorrow'}, {'priority': 'x'}):
            with self.subTest(data=data):
                success, _, _ = board_service.update_card(card, data)
                self.assertFalse(success)

        card.refresh_from_db()
        self.assertEqual(card.content, 'task')

    def test_delete_card_renumbers(self):
        a, b, c = self.make_cards(self.todo, 'a', 'b', 'c')

        board_service.delete_card(b)

        self.assertEqual(self.contents(self.todo), ['a', 'c'])
        self.assertEqual(self.orders(self.todo), [0, 1])

    def test_reorder_cards(self):
        a, b, c = self.make_cards(self.todo, 'a', 'b', 'c')

        success, _, _ = board_service.reorder_cards(self.todo, [c.id, a.id, b.id])

        self.assertTrue(success)
        self.assertEqual(self.contents(self.todo), ['c', 'a', 'b'])

    def test_reorder_cards_rejects_foreign_ids(self):
        a, b = self.make_cards(self.todo, 'a', 'b')
        other, = self.make_cards(self.doing, 'other')

        success, _, _ = board_service.reorder_cards(self.todo, [a.id, other.id])

        self.assertFalse(success)
        self.assertEqual(self.contents(self.todo), ['a', 'b'])


class MoveCardTest(BoardServiceTestMixin, TestCase):

    def test_move_within_list(self):
        a, b, c = self.make_cards(self.todo, 'a', 'b', 'c')

        success, _, result = board_service.move_card(a, self.todo.id, 2)

        self.assertTrue(success)
        self.assertEqual(self.contents(self.todo), ['b', 'c', 'a'])
        self.assertEqual(self.orders(self.todo), [0, 1, 2])
        self.assertEqual(result['from_list'], self.todo)
        self.assertEqual(result['to_list'], self.todo)

    def test_move_across_lists(self):
        a, b, c = self.make_cards(self.todo, 'a', 'b', 'c')
        self.make_cards(self.doing, 'x', 'y')

        success, _, result = board_service.move_card(b, self.doing.id, 1)

        self.assertTrue(success)
        self.assertEqual(self.contents(self.todo), ['a', 'c'])
        self.assertEqual(self.orders(self.todo), [0, 1])
        self.assertEqual(self.contents(self.doing), ['x', 'b', 'y'])
        self.assertEqual(self.orders(self.doing), [0, 1, 2])
        self.assertEqual(result['card'].task_list_id, self.doing.id)

    def test_move_into_empty_list(self):
        a, = self.make_cards(self.todo, 'a')

        board_service.move_card(a, self.done.id, 0)

        self.assertEqual(self.contents(self.done), ['a'])
        self.assertEqual(self.contents(self.todo), [])

    def test_index_is_clamped(self):
        a, b, c = self.make_cards(self.todo, 'a', 'b', 'c')

        board_service.move_card(a, self.todo.id, 99)
        self.assertEqual(self.contents(self.todo), ['b', 'c', 'a'])

        board_service.move_card(a, self.todo.id, -5)
        self.assertEqual(self.contents(self.todo), ['a', 'b', 'c'])

    def test_move_to_other_board_rejected(self):
        a, b = self.make_cards(self.todo, 'a', 'b')
        other_board = Board.objects.create(title='Other', owner=self.owner)
        foreign_list = other_board.lists.first()

        success, message, result = board_service.move_card(a, foreign_list.id, 0)

        self.assertFalse(success)
        self.assertIsNone(result)
        self.assertEqual(self.contents(self.todo), ['a', 'b'])
        self.assertFalse(foreign_list.cards.exists())

    def test_move_to_missing_list(self):
        a, = self.make_cards(self.todo, 'a')
        success, message, _ = board_service.move_card(a, 9999, 0)
        self.assertFalse(success)
        self.assertEqual(message, 'List not found')

    def test_invalid_index(self):
        a, = self.make_cards(self.todo, 'a')
        success, message, _ = board_service.move_card(a, self.todo.id, 'abc')
        self.assertFalse(success)
        self.assertEqual(message, 'Invalid position')


class SubtaskOperationsTest(BoardServiceTestMixin, TestCase):

    def setUp(self):
        self.card = Card.objects.create(content='Ship', task_list=self.todo)

    def test_add_and_toggle(self):
        success, _, subtask = board_service.add_subtask(self.card, 'Write tests')
        self.assertTrue(success)
        self.assertFalse(subtask.completed)

        board_service.toggle_subtask(subtask)
        subtask.refresh_from_db()
        self.assertTrue(subtask.completed)
        self.assertEqual(self.card.subtask_progress(), 100)

    def test_add_requires_content(self):
        success, _, subtask = board_service.add_subtask(self.card, '')
        self.assertFalse(success)
        self.assertIsNone(subtask)

    def test_update_accepts_string_flags(self):
        _, _, subtask = board_service.add_subtask(self.card, 'Write tests')

        board_service.update_subtask(subtask, {'completed': 'true', 'content': 'Write more tests'})

        subtask.refresh_from_db()
        self.assertTrue(subtask.completed)
        self.assertEqual(subtask.content, 'Write more tests')

    def test_delete_renumbers(self):
        _, _, first = board_service.add_subtask(self.card, 'one')
        board_service.add_subtask(self.card, 'two')
        board_service.add_subtask(self.card, 'three')

        board_service.delete_subtask(first)

        remaining = list(self.card.subtasks.order_by('order').values_list('content', 'order'))
        self.assertEqual(remaining, [('two', 0), ('three', 1)])


class QueryTest(BoardServiceTestMixin, TestCase):

    def test_search_cards(self):
        Card.objects.create(content='Fix login bug', task_list=self.todo, priority=Card.PRIORITY_HIGH)
        Card.objects.create(content='Docs', description='explain the LOGIN flow', task_list=self.doing)
        Card.objects.create(content='Unrelated', task_list=self.done)
        other_board = Board.objects.create(title='Other', owner=self.owner)
        Card.objects.create(content='login elsewhere', task_list=other_board.lists.first())

        success, _, cards = board_service.search_cards(self.board, 'login')
        self.assertTrue(success)
        self.assertEqual([c.content for c in cards], ['Fix login bug', 'Docs'])

        success, _, cards = board_service.search_cards(self.board, 'login', 'high')
        self.assertEqual([c.content for c in cards], ['Fix login bug'])

        success, message, cards = board_service.search_cards(self.board, 'login', 'urgent')
        self.assertFalse(success)
        self.assertEqual(cards, [])

    def test_calendar_cards(self):
        member = User.objects.create_user(username='member', email='member@example.com', password='password123')
        BoardMember.objects.create(board=self.board, user=member)
        hidden_board = Board.objects.create(title='Hidden', owner=self.owner)

        today = timezone.localdate()
        soon = Card.objects.create(content='soon', task_list=self.todo, deadline=today + timedelta(days=2))
        Card.objects.create(content='later', task_list=self.todo, deadline=today + timedelta(days=40))
        Card.objects.create(content='undated', task_list=self.todo)
        Card.objects.create(content='hidden', task_list=hidden_board.lists.first(), deadline=today)

        cards = board_service.get_calendar_cards(member, today, today + timedelta(days=30))

        self.assertEqual(cards, [soon])


class ParseIdsTest(TestCase):

    def test_parse_ids(self):
        self.assertEqual(parse_ids([1, '2']), [1, 2])
        self.assertEqual(parse_ids('3,4'), [3, 4])

        for value in (None, ['x'], {'a': 1}):
            with self.subTest(value=value):
                with self.assertRaises(ValueError):
                    parse_ids(value)
