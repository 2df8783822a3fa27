# services/export_service.py
"""
Attendance list export to CSV and Excel.
"""

import csv
import io
import logging
from datetime import datetime

import pandas as pd

EXPORT_COLUMNS = ['Name', 'Matric No', 'Attended At (UTC)']
# Attendance timestamps are stored as naive UTC
TIMESTAMP_FORMAT = '%B %d, %Y %I:%M %p'

CONTENT_TYPES = {
    'csv': 'text/csv; charset=utf-8',
    'xlsx': 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'
}


class ExportError:
    NO_ATTENDANCE = 'no_attendance'
    UNSUPPORTED_FORMAT = 'unsupported_format'
    EXPORT_FAILED = 'export_failed'


class ExportService:
    """Formats an attendance list as a downloadable file."""

    @staticmethod
    def attendance_rows(attendances):
        rows = []
        for attendance in attendances:
            timestamp = attendance.timestamp
            rows.append({
                'Name': attendance.student_name,
                'Matric No': attendance.matric_no,
                'Attended At (UTC)': timestamp.strftime(TIMESTAMP_FORMAT) if timestamp else ''
            })
        return rows

    @staticmethod
    def export_attendance(attendances, file_format='csv'):
        """
        Export attendance records.

        Args:
            attendances: Attendance records, already ordered
            file_format: 'csv' or 'xlsx'

        Returns:
            dict: {'success', 'content', 'filename', 'content_type'} or an error
        """
        logger = logging.getLogger('export_service')

        file_format = (file_format or 'csv').lower()
        if file_format not in CONTENT_TYPES:
            return {
                'success': False,
                'message': f'Unsupported export format: {file_format}',
                'error_code': ExportError.UNSUPPORTED_FORMAT
            }

        if not attendances:
            return {
                'success': False,
                'message': 'No attendees found for this class.',
                'error_code': ExportError.NO_ATTENDANCE
            }

        rows = ExportService.attendance_rows(attendances)

        try:
            if file_format == 'csv':
                content = ExportService._to_csv(rows)
            else:
                content = ExportService._to_excel(rows)
        except Exception as e:
            logger.error(f"Attendance export failed: {str(e)}", exc_info=True)
            return {
                'success': False,
                'message': 'Export failed',
                'error_code': ExportError.EXPORT_FAILED
            }

        timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
        logger.info(f"Exported {len(rows)} attendance records as {file_format}")

        return {
            'success': True,
            'content': content,
            'filename': f'attendance_list_{timestamp}.{file_format}',
            'content_type': CONTENT_TYPES[file_format]
        }

    @staticmethod
    def _to_csv(rows):
        output = io.StringIO()
        writer = csv.DictWriter(output, fieldnames=EXPORT_COLUMNS)
        writer.writeheader()
        writer.writerows(rows)
        return output.getvalue().encode('utf-8')

    @staticmethod
    def _to_excel(rows):
        df = pd.DataFrame(rows, columns=EXPORT_COLUMNS)

        output = io.BytesIO()
        with pd.ExcelWriter(output, engine='xlsxwriter') as writer:
            df.to_excel(writer, sheet_name='Attendance', index=False)

            # Set column widths to accommodate the content
            worksheet = writer.sheets['Attendance']
            for i, col in enumerate(df.columns):
                max_len = max(df[col].astype(str).apply(len).max(), len(col)) + 2
                worksheet.set_column(i, i, max_len)

        output.seek(0)
        return output.getvalue()
