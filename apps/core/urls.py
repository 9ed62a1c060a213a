# apps/core/urls.py

from django.urls import path
from . import views

app_name = 'core'

urlpatterns = [
    # === AUTHENTICATION ===
    path('login/', views.login_view, name='login'),
    path('logout/', views.logout_view, name='logout'),
    path('signup/', views.signup_view, name='signup'),

    # === DASHBOARD ===
    path('dashboard/', views.dashboard, name='dashboard'),
    path('', views.dashboard, name='home'),

    # === BOARDS ===
    path('boards/create/', views.create_board, name='create_board'),
    path('boards/<int:board_id>/update/', views.update_board, name='update_board'),
    path('boards/<int:board_id>/delete/', views.delete_board, name='delete_board'),

    # === MEMBERS & INVITATIONS ===
    path('boards/<int:board_id>/members/', views.board_members, name='board_members'),
    path('boards/<int:board_id>/members/invite/', views.invite_member, name='invite_member'),
    path('boards/<int:board_id>/members/<int:member_id>/remove/', views.remove_member, name='remove_member'),
    path('invitations/<int:invitation_id>/accept/', views.accept_invitation, name='accept_invitation'),
    path('invitations/<int:invitation_id>/decline/', views.decline_invitation, name='decline_invitation'),

    # === NOTIFICATIONS ===
    path('notifications/', views.notifications_list, name='notifications'),
    path('notifications/read-all/', views.notifications_mark_all_read, name='notifications_read_all'),
    path('notifications/<int:notification_id>/read/', views.notification_mark_read, name='notification_read'),
    path('notifications/<int:notification_id>/delete/', views.notification_delete, name='notification_delete'),

    # === MONITORING ===
    path('health/', views.health_check, name='health'),

    # === AJAX APIs ===
    path('api/boards/', views.api_boards, name='api_boards'),
    path('api/invitations/', views.pending_invitations, name='api_invitations'),
]
