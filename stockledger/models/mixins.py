from ..extensions import db
from ..utils.timezone_utils import TimezoneUtils


class CreatedAtMixin:
    """Adds a server-assigned creation timestamp."""
    created_at = db.Column(db.DateTime(timezone=True), default=TimezoneUtils.utc_now, nullable=False, index=True)


class TimestampMixin(CreatedAtMixin):
    """Adds created_at and updated_at timestamps to models"""
    updated_at = db.Column(db.DateTime(timezone=True), default=TimezoneUtils.utc_now, onupdate=TimezoneUtils.utc_now, nullable=False)
