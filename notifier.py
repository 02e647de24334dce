"""Console and daily log file output for monitoring events.

Every event goes through the ``uptime_checker`` logger. The console shows
``<timestamp> - <message>``; the log directory gets one file per calendar
day (``uptime_YYYYMMDD.log``), opened at the first record of that day.
"""
import logging
import os
from datetime import datetime

LOGGER_NAME = 'uptime_checker'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def get_logger(name=None):
    if name:
        return logging.getLogger(f'{LOGGER_NAME}.{name}')
    return logging.getLogger(LOGGER_NAME)


class DailyFileHandler(logging.FileHandler):
    """FileHandler that switches to a new dated file when the day changes."""

    def __init__(self, log_dir, prefix='uptime', encoding='utf-8', clock=datetime.now):
        self.log_dir = log_dir
        self.prefix = prefix
        self.clock = clock
        self.current_day = self.clock().strftime('%Y%m%d')
        os.makedirs(log_dir, exist_ok=True)
        super().__init__(self.path_for(self.current_day), encoding=encoding, delay=True)

    def path_for(self, day):
        return os.path.join(self.log_dir, f'{self.prefix}_{day}.log')

    def emit(self, record):
        day = datetime.fromtimestamp(record.created).strftime('%Y%m%d')
        if day != self.current_day:
            self.acquire()
            try:
                if self.stream:
                    self.stream.close()
                    self.stream = None
                self.current_day = day
                os.makedirs(self.log_dir, exist_ok=True)
                self.baseFilename = os.path.abspath(self.path_for(day))
            finally:
                self.release()
        super().emit(record)


def setup_logging(log_dir='logs', level='INFO'):
    logger = get_logger()
    logger.setLevel(level)
    logger.propagate = False

    # idempotent: drop handlers from an earlier call
    for handler in list(logger.handlers):
        if getattr(handler, '_uptime_checker', False):
            logger.removeHandler(handler)
            handler.close()

    console = logging.StreamHandler()
    console.setFormatter(logging.Formatter('%(asctime)s - %(message)s', DATE_FORMAT))
    console._uptime_checker = True
    logger.addHandler(console)

    if log_dir:
        daily = DailyFileHandler(log_dir)
        daily.setFormatter(logging.Formatter('%(asctime)s %(levelname)s: %(message)s', DATE_FORMAT))
        daily._uptime_checker = True
        logger.addHandler(daily)

    return logger
