"""Report queries package."""

from finledger.queries.reports import ReportQueries

__all__ = ["ReportQueries"]
