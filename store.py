"""Site Store: persistence of the monitored site list.

Every mutating event is followed by a full commit of the session. Writes
from the scheduler thread and from the web or shell surfaces are
serialised through ``lock``.
"""
import json
import threading

from sqlalchemy.exc import SQLAlchemyError

from errors import InvalidSiteError, StoreError
from models import db, Site, DEFAULT_INTERVAL, DEFAULT_THRESHOLD
from notifier import get_logger

log = get_logger('store')

lock = threading.RLock()


class SiteStore:

    def __init__(self, session=None):
        self._session = session

    @property
    def session(self):
        return self._session if self._session is not None else db.session

    def all(self):
        return self.session.query(Site).order_by(Site.id).all()

    def get(self, site_id):
        return self.session.get(Site, site_id)

    def load(self):
        """Return all sites with monitoring state reset to its initial values."""
        with lock:
            sites = self.all()
            for site in sites:
                site.reset_monitoring_state()
            self.save()
        log.info(f"Loaded {len(sites)} sites from configuration")
        if sites:
            log.info("Reset all failure counts to 0 on startup")
        return sites

    def add(self, url, interval=None, threshold=None, command=None):
        """Create and persist a site. Raises InvalidSiteError before any write."""
        fields = {'url': url, 'command': command}
        if interval is not None:
            fields['interval'] = interval
        if threshold is not None:
            fields['threshold'] = threshold
        site = Site(**fields)
        with lock:
            self.session.add(site)
            self.save()
        log.info(f"Site added: {site.url} (every {site.interval}s, "
                 f"command after {site.threshold} failures: {site.command or 'None'})")
        return site

    def remove(self, site_id):
        with lock:
            site = self.get(site_id)
            if site is None:
                return None
            self.session.delete(site)
            self.save()
        log.info(f"Removed: {site.url}")
        return site

    def remove_at(self, position):
        """Remove by 1-based position in the listing."""
        sites = self.all()
        if position < 1 or position > len(sites):
            return None
        return self.remove(sites[position - 1].id)

    def save(self):
        with lock:
            try:
                self.session.commit()
            except SQLAlchemyError as e:
                self.session.rollback()
                log.critical(f"Could not write site store: {e}", exc_info=True)
                raise StoreError(str(e)) from e

    def export_json(self, path):
        records = [site.to_dict() for site in self.all()]
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(records, f, indent=2)
        log.info(f"Exported {len(records)} sites to {path}")
        return len(records)

    def import_json(self, path):
        """Add the sites listed in a sites.json file; monitoring state is not imported."""
        with open(path, 'r', encoding='utf-8') as f:
            records = json.load(f)
        if not isinstance(records, list):
            raise InvalidSiteError(f"{path} must contain a list of site records")
        sites = []
        with lock:
            for position, data in enumerate(records, start=1):
                if not isinstance(data, dict):
                    raise InvalidSiteError(f"{path}: record {position} is not an object")
                sites.append(Site(
                    url=data.get('url'),
                    interval=data.get('interval', DEFAULT_INTERVAL),
                    threshold=data.get('threshold', DEFAULT_THRESHOLD),
                    command=data.get('command'),
                ))
            self.session.add_all(sites)
            self.save()
        log.info(f"Imported {len(sites)} sites from {path}")
        return sites
