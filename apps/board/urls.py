# apps/board/urls.py

from django.urls import path
from . import views

app_name = 'board'

urlpatterns = [
    # Kanban page and state
    path('<int:board_id>/', views.board_kanban_view, name='kanban'),
    path('<int:board_id>/state/', views.board_state, name='state'),
    path('<int:board_id>/search/', views.search_cards, name='search_cards'),

    # Lists
    path('<int:board_id>/lists/create/', views.create_list, name='create_list'),
    path('<int:board_id>/lists/reorder/', views.reorder_lists, name='reorder_lists'),
    path('lists/<int:list_id>/rename/', views.rename_list, name='rename_list'),
    path('lists/<int:list_id>/delete/', views.delete_list, name='delete_list'),
    path('lists/<int:list_id>/reorder/', views.reorder_cards, name='reorder_cards'),

    # Cards
    path('lists/<int:list_id>/cards/create/', views.create_card, name='create_card'),
    path('cards/<int:card_id>/', views.card_detail, name='card_detail'),
    path('cards/<int:card_id>/update/', views.update_card, name='update_card'),
    path('cards/<int:card_id>/delete/', views.delete_card, name='delete_card'),
    path('cards/<int:card_id>/move/', views.move_card, name='move_card'),

    # Subtasks
    path('cards/<int:card_id>/subtasks/add/', views.add_subtask, name='add_subtask'),
    path('subtasks/<int:subtask_id>/toggle/', views.toggle_subtask, name='toggle_subtask'),
    path('subtasks/<int:subtask_id>/update/', views.update_subtask, name='update_subtask'),
    path('subtasks/<int:subtask_id>/delete/', views.delete_subtask, name='delete_subtask'),

    # Calendar
    path('calendar/', views.calendar_view, name='calendar'),
    path('api/calendar/', views.calendar_api, name='calendar_api'),
]
