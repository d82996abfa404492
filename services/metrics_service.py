# services/metrics_service.py
"""
Metrics Service - Usage numbers for the admin dashboard.
"""

from datetime import datetime, timedelta

from sqlalchemy import func

from models import db, User, Document, Template


class MetricsService:
    """Aggregate counts over users, documents and templates."""

    POPULAR_LIMIT = 5
    RECENT_DAYS = 7
    HISTORY_DAYS = 30

    def __init__(self, now=None):
        self.now = now or datetime.utcnow()

    def get_overview(self):
        """Totals plus users and documents created in the recent window."""
        since = self.now - timedelta(days=self.RECENT_DAYS)
        return {
            'total_users': User.query.count(),
            'total_documents': Document.query.count(),
            'recent_users': User.query.filter(User.created_at >= since).count(),
            'recent_documents': Document.query.filter(Document.created_at >= since).count(),
        }

    def get_documents_by_status(self):
        rows = db.session.query(Document.status, func.count(Document.id)).\
            group_by(Document.status).all()
        return [{'status': status, 'count': count} for status, count in rows]

    def get_popular_templates(self, limit=None):
        """Templates ordered by how many documents were started from them."""
        count = func.count(Document.id)
        rows = db.session.query(Template.id, Template.title, count).\
            join(Document, Document.template_id == Template.id).\
            group_by(Template.id, Template.title).\
            order_by(count.desc(), Template.id).\
            limit(limit or self.POPULAR_LIMIT).all()
        return [
            {'template_id': template_id, 'template_title': title, 'count': total}
            for template_id, title, total in rows
        ]

    def get_documents_per_day(self):
        since = self.now - timedelta(days=self.HISTORY_DAYS)
        day = func.date(Document.created_at)
        rows = db.session.query(day, func.count(Document.id)).\
            filter(Document.created_at >= since).\
            group_by(day).order_by(day).all()
        return [{'date': str(d), 'count': int(c)} for d, c in rows]

    def get_metrics(self):
        return {
            'overview': self.get_overview(),
            'documents_by_status': self.get_documents_by_status(),
            'popular_templates': self.get_popular_templates(),
            'documents_per_day': self.get_documents_per_day(),
        }
