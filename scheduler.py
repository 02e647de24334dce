import enum
from datetime import datetime

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.schedulers.blocking import BlockingScheduler

from actions import ShellActionRunner
from errors import StoreError
from notifier import get_logger
from prober import HttpProber
from store import SiteStore, lock
from tracker import FailureTracker

log = get_logger('scheduler')


class MonitorState(enum.Enum):
    IDLE = 'idle'
    SCANNING = 'scanning'
    STOPPED = 'stopped'


class Monitor:
    """Polls every site on a fixed tick and checks the ones that are due.

    Sites are checked one after another inside a tick. The tick job never
    overlaps itself, so all site state is mutated from one thread at a time.
    """

    JOB_ID = 'uptime_tick'

    def __init__(self, store, tracker, prober, clock=datetime.now, tick_seconds=1, app=None):
        self.store = store
        self.tracker = tracker
        self.prober = prober
        self.clock = clock
        self.tick_seconds = tick_seconds
        self.app = app
        self.state = MonitorState.IDLE
        self._scheduler = None

    @property
    def running(self):
        return self._scheduler is not None and self._scheduler.running

    def is_due(self, site, now):
        if site.last_checked is None:
            return True
        return (now - site.last_checked).total_seconds() >= site.interval

    def check_site(self, site):
        outcome = self.prober(site.url)
        transition = self.tracker.record(site, outcome)
        site.last_checked = self.clock()
        self.store.save()
        return transition

    def tick(self):
        """Check every due site once. Returns the sites that were checked."""
        checked = []
        with lock:
            self.state = MonitorState.SCANNING
            try:
                now = self.clock()
                for site in self.store.all():
                    if not self.is_due(site, now):
                        continue
                    try:
                        self.check_site(site)
                    except StoreError:
                        # logged by the store; keep going with the other sites
                        continue
                    checked.append(site)
            finally:
                if self.state is MonitorState.SCANNING:
                    self.state = MonitorState.IDLE
        return checked

    def _run_tick(self):
        if self.app is None:
            return self.tick()
        with self.app.app_context():
            return self.tick()

    def _schedule(self, scheduler):
        scheduler.add_job(
            self._run_tick,
            'interval',
            seconds=self.tick_seconds,
            id=self.JOB_ID,
            max_instances=1,
            coalesce=True,
            next_run_time=datetime.now(),
            replace_existing=True
        )
        self._scheduler = scheduler
        self.state = MonitorState.IDLE

    def run_forever(self):
        """Monitor in the foreground until Ctrl+C, then persist and return."""
        scheduler = BlockingScheduler()
        self._schedule(scheduler)
        log.info("Starting monitoring... Press Ctrl+C to stop")
        try:
            scheduler.start()
        except (KeyboardInterrupt, SystemExit):
            pass
        finally:
            self.stop()

    def start_background(self):
        if self.running:
            return False
        scheduler = BackgroundScheduler()
        self._schedule(scheduler)
        scheduler.start()
        log.info("Starting monitoring...")
        return True

    def stop(self):
        """Finish the running tick, flush the store and enter STOPPED."""
        scheduler, self._scheduler = self._scheduler, None
        if scheduler is None:
            return False
        if scheduler.running:
            scheduler.shutdown(wait=True)
        log.info("Stopping monitoring...")
        if self.app is None:
            self.store.save()
        else:
            with self.app.app_context():
                self.store.save()
        self.state = MonitorState.STOPPED
        return True


def build_monitor(app):
    config = app.config
    tracker = FailureTracker(
        ShellActionRunner(timeout=config['ACTION_TIMEOUT']),
        policy=config['RESET_POLICY']
    )
    prober = HttpProber(timeout=config['PROBE_TIMEOUT'], user_agent=config['USER_AGENT'])
    return Monitor(SiteStore(), tracker, prober, tick_seconds=config['TICK_SECONDS'], app=app)
