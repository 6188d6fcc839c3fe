"""
Admin triage: objection listings and status transitions.
"""

from .queries import AdminQueryEngine, Page, parse_page, ACTIVE_LISTING, ARCHIVE_LISTING

__all__ = ['AdminQueryEngine', 'Page', 'parse_page', 'ACTIVE_LISTING', 'ARCHIVE_LISTING']
