import enum

import requests

from notifier import get_logger

log = get_logger('prober')


class Outcome(enum.Enum):
    UP = 'up'
    DOWN = 'down'


class HttpProber:
    """One GET per call. Only a 2xx final status counts as UP; never raises."""

    def __init__(self, timeout=10, user_agent='UptimeChecker', session=None):
        self.timeout = timeout
        self.headers = {'Cache-Control': 'no-cache', 'User-Agent': user_agent}
        self.session = session or requests.Session()

    def __call__(self, url):
        try:
            response = self.session.get(url, headers=self.headers, timeout=self.timeout)
        except Exception as e:
            log.error(f"Error checking {url}: {e}")
            return Outcome.DOWN

        if 200 <= response.status_code < 300:
            log.debug(f"[UP] {url} -> {response.status_code}")
            return Outcome.UP
        log.debug(f"[DOWN] {url} -> {response.status_code}")
        return Outcome.DOWN
