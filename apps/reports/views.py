# apps/reports/views.py

import csv
import logging
from io import BytesIO

from django.contrib.auth.decorators import login_required
from django.http import HttpResponse, JsonResponse
from django.utils import timezone
from django.utils.html import escape
from django.views.decorators.http import require_GET

# PDF
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer

# Excel
import xlsxwriter

from apps.core.models import Card
from apps.core.permissions import ajax_requires_board_access, requires_board_access
from .utils import CARD_HEADERS, board_cards, build_board_summary, card_row, export_filename

logger = logging.getLogger(__name__)


def _table_style(header_color, body_color):
    return TableStyle([
        ('BACKGROUND', (0, 0), (-1, 0), header_color),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
        ('ALIGN', (0, 0), (-1, -1), 'LEFT'),
        ('VALIGN', (0, 0), (-1, -1), 'TOP'),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 0), (-1, 0), 11),
        ('FONTSIZE', (0, 1), (-1, -1), 9),
        ('BOTTOMPADDING', (0, 0), (-1, 0), 8),
        ('BACKGROUND', (0, 1), (-1, -1), body_color),
        ('GRID', (0, 0), (-1, -1), 0.5, colors.black)
    ])


@login_required
@requires_board_access
def board_report_pdf(request, board_id):
    """
    Board report in PDF: summary, one card table per list, members
    """
    board = request.board
    summary = build_board_summary(board)

    response = HttpResponse(content_type='application/pdf')
    response['Content-Disposition'] = f'attachment; filename="{export_filename(board, "pdf")}"'

    doc = SimpleDocTemplate(response, pagesize=A4, title=board.title)
    story = []

    styles = getSampleStyleSheet()
    title_style = ParagraphStyle(
        'BoardTitle',
        parent=styles['Heading1'],
        fontSize=20,
        spaceAfter=20,
        textColor=colors.darkblue
    )
    heading_style = ParagraphStyle(
        'BoardHeading',
        parent=styles['Heading2'],
        fontSize=14,
        spaceAfter=10,
        textColor=colors.darkblue
    )
    cell_style = styles['BodyText']

    story.append(Paragraph(f"Board report: {escape(board.title)}", title_style))
    if board.description:
        story.append(Paragraph(escape(board.description), styles['Normal']))
    story.append(Paragraph(f"Owner: {escape(board.owner.get_display_name())}", styles['Normal']))
    story.append(Paragraph(f"Generated at: {timezone.localtime().strftime('%Y-%m-%d %H:%M')}", styles['Normal']))
    story.append(Spacer(1, 16))

    # Summary
    story.append(Paragraph("Summary", heading_style))
    summary_data = [
        ['Metric', 'Value'],
        ['Cards', str(summary['total_cards'])],
        ['Lists', str(len(summary['lists']))],
        ['Members', str(summary['members'])],
        ['Overdue cards', str(summary['overdue'])],
        ['Due today', str(summary['due_today'])],
        ['Subtasks done', f"{summary['subtasks']['done']}/{summary['subtasks']['total']} ({summary['subtasks']['progress']}%)"],
    ]
    for priority, label in Card.PRIORITY_CHOICES:
        summary_data.append([f'{label} priority', str(summary['priorities'][priority])])

    summary_table = Table(summary_data, colWidths=[200, 200])
    summary_table.setStyle(_table_style(colors.grey, colors.beige))
    story.append(summary_table)
    story.append(Spacer(1, 16))

    # Cards per list
    cards_by_list = {}
    for card in board_cards(board):
        cards_by_list.setdefault(card.task_list_id, []).append(card)

    for task_list in board.lists.order_by('order', 'id'):
        story.append(Paragraph(escape(task_list.title), heading_style))
        cards = cards_by_list.get(task_list.id, [])

        if not cards:
            story.append(Paragraph("No cards in this list.", styles['Normal']))
            story.append(Spacer(1, 10))
            continue

        rows = [['Card', 'Priority', 'Deadline', 'Subtasks']]
        for card in cards:
            rows.append([
                Paragraph(escape(card.content), cell_style),
                card.get_priority_display(),
                card.deadline.strftime('%Y-%m-%d') if card.deadline else '-',
                f"{card.subtasks_done}/{card.subtasks_total}",
            ])

        cards_table = Table(rows, colWidths=[250, 70, 80, 60], repeatRows=1)
        cards_table.setStyle(_table_style(colors.blue, colors.lightblue))
        story.append(cards_table)
        story.append(Spacer(1, 12))

    # Members
    story.append(Paragraph("Members", heading_style))
    members_data = [['Name', 'Email', 'Role']]
    for membership in board.memberships.select_related('user').order_by('joined_at', 'id'):
        members_data.append([
            membership.user.get_display_name(),
            membership.user.email,
            membership.get_role_display(),
        ])

    members_table = Table(members_data)
    members_table.setStyle(_table_style(colors.green, colors.lightgreen))
    story.append(members_table)

    story.append(Spacer(1, 24))
    story.append(Paragraph("Report generated by Taskboard", styles['Normal']))

    doc.build(story)
    logger.info(f"📄 PDF report of board {board.id} generated for {request.user.email}")
    return response


@login_required
@requires_board_access
def export_board_csv(request, board_id):
    """
    Exports the board cards as CSV
    """
    board = request.board

    response = HttpResponse(content_type='text/csv; charset=utf-8')
    response['Content-Disposition'] = f'attachment; filename="{export_filename(board, "csv")}"'
    response.write('\ufeff')  # UTF-8 BOM for spreadsheet apps

    writer = csv.writer(response)
    writer.writerow(CARD_HEADERS)

    for card in board_cards(board):
        writer.writerow(card_row(card))

    return response


@login_required
@requires_board_access
def export_board_excel(request, board_id):
    """
    Exports the board as Excel (XLSX)
    Summary sheet plus a sheet with every card
    """
    board = request.board
    summary = build_board_summary(board)

    output = BytesIO()
    workbook = xlsxwriter.Workbook(output, {'in_memory': True})

    header_format = workbook.add_format({
        'bold': True,
        'font_color': 'white',
        'bg_color': '#366092',
        'border': 1
    })
    cell_format = workbook.add_format({'border': 1})

    # Sheet 1: summary
    summary_sheet = workbook.add_worksheet('Summary')
    summary_sheet.write('A1', 'BOARD REPORT', header_format)
    summary_sheet.write('A3', 'Board:', header_format)
    summary_sheet.write('B3', board.title, cell_format)
    summary_sheet.write('A4', 'Owner:', header_format)
    summary_sheet.write('B4', board.owner.get_display_name(), cell_format)
    summary_sheet.write('A5', 'Created at:', header_format)
    summary_sheet.write('B5', board.created_at.strftime('%Y-%m-%d'), cell_format)
    summary_sheet.write('A6', 'Members:', header_format)
    summary_sheet.write('B6', summary['members'], cell_format)

    summary_sheet.write('A8', 'STATISTICS', header_format)
    statistics = [
        ('Cards', summary['total_cards']),
        ('Overdue', summary['overdue']),
        ('Due today', summary['due_today']),
        ('Subtasks done', summary['subtasks']['done']),
        ('Subtasks total', summary['subtasks']['total']),
    ]
    statistics += [
        (f'{label} priority', summary['priorities'][priority])
        for priority, label in Card.PRIORITY_CHOICES
    ]
    statistics += [(f'List: {item["title"]}', item['cards']) for item in summary['lists']]

    for row, (label, value) in enumerate(statistics, 8):
        summary_sheet.write(row, 0, label, header_format)
        summary_sheet.write(row, 1, value, cell_format)

    # Sheet 2: cards
    cards_sheet = workbook.add_worksheet('Cards')
    for col, header in enumerate(CARD_HEADERS):
        cards_sheet.write(0, col, header, header_format)

    for row, card in enumerate(board_cards(board), 1):
        for col, value in enumerate(card_row(card)):
            cards_sheet.write(row, col, value, cell_format)

    summary_sheet.set_column('A:B', 22)
    cards_sheet.set_column('A:J', 18)

    workbook.close()
    output.seek(0)

    response = HttpResponse(
        output.read(),
        content_type='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'
    )
    response['Content-Disposition'] = f'attachment; filename="{export_filename(board, "xlsx")}"'

    return response


@require_GET
@ajax_requires_board_access
def api_board_summary(request, board_id):
    return JsonResponse({
        'success': True,
        'summary': build_board_summary(request.board),
    })
