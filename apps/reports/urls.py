# apps/reports/urls.py

from django.urls import path
from . import views

app_name = 'reports'

urlpatterns = [
    # Board exports
    path('board/<int:board_id>/pdf/', views.board_report_pdf, name='board_pdf'),
    path('board/<int:board_id>/csv/', views.export_board_csv, name='board_csv'),
    path('board/<int:board_id>/excel/', views.export_board_excel, name='board_excel'),

    # Statistics for the board header
    path('api/board/<int:board_id>/summary/', views.api_board_summary, name='api_board_summary'),
]
