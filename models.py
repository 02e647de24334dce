from datetime import datetime
from urllib.parse import urlparse

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy.orm import validates

from errors import InvalidSiteError

db = SQLAlchemy()

DEFAULT_INTERVAL = 5
DEFAULT_THRESHOLD = 3


def validate_url(url):
    url = (url or '').strip()
    parsed = urlparse(url)
    if parsed.scheme not in ('http', 'https') or not parsed.netloc:
        raise InvalidSiteError(
            f'Invalid URL format: {url!r}. Make sure to include http:// or https://'
        )
    return url


def _positive_int(name, value):
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise InvalidSiteError(f'{name} must be a positive integer, got {value!r}')
    if number < 1:
        raise InvalidSiteError(f'{name} must be a positive integer, got {value!r}')
    return number


class Site(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    url = db.Column(db.String(2048), nullable=False)
    interval = db.Column(db.Integer, nullable=False, default=DEFAULT_INTERVAL)
    threshold = db.Column(db.Integer, nullable=False, default=DEFAULT_THRESHOLD)
    command = db.Column(db.Text)  # None means "no action"

    # monitoring state, reset on every load
    failures = db.Column(db.Integer, nullable=False, default=0)
    last_checked = db.Column(db.DateTime)
    action_fired = db.Column(db.Boolean, nullable=False, default=False)

    created_at = db.Column(db.DateTime, default=datetime.now)

    def __init__(self, **kwargs):
        kwargs.setdefault('interval', DEFAULT_INTERVAL)
        kwargs.setdefault('threshold', DEFAULT_THRESHOLD)
        kwargs.setdefault('failures', 0)
        kwargs.setdefault('action_fired', False)
        super().__init__(**kwargs)

    @validates('url')
    def _check_url(self, key, url):
        return validate_url(url)

    @validates('interval', 'threshold')
    def _check_positive(self, key, value):
        return _positive_int(key, value)

    @validates('command')
    def _check_command(self, key, command):
        if command is None:
            return None
        command = command.strip()
        return command or None

    def reset_monitoring_state(self):
        self.failures = 0
        self.last_checked = None
        self.action_fired = False

    def to_dict(self):
        return {
            'url': self.url,
            'interval': self.interval,
            'threshold': self.threshold,
            'command': self.command,
            'failures': self.failures,
            'last_checked': self.last_checked.isoformat() if self.last_checked else None,
            'command_executed': self.action_fired,
        }

    def __repr__(self):
        return f"<Site {self.url}>"
