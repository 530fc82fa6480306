from sleep_report.core.services.report_service import ReportService

__all__ = ['ReportService']
