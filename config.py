import os

from errors import ConfigError

POLICIES = ('rearm', 'suppress')


def _int(name, default, minimum=1):
    raw = os.getenv(name)
    if raw is None or raw.strip() == '':
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(f'{name} must be an integer, got {raw!r}')
    if value < minimum:
        raise ConfigError(f'{name} must be >= {minimum}, got {value}')
    return value


def _timeout(name, default):
    # 0 or empty disables the timeout
    raw = os.getenv(name)
    if raw is None:
        return default
    if raw.strip() in ('', '0'):
        return None
    try:
        value = float(raw)
    except ValueError:
        raise ConfigError(f'{name} must be a number of seconds, got {raw!r}')
    if value < 0:
        raise ConfigError(f'{name} must not be negative')
    return value


class Config:
    SECRET_KEY = os.getenv('SECRET_KEY', 'change-me-in-production')
    SQLALCHEMY_DATABASE_URI = os.getenv('DATABASE_URL', 'sqlite:///sites.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    LOG_DIR = os.getenv('LOG_DIR', 'logs')
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()

    TICK_SECONDS = _int('TICK_SECONDS', 1)
    DEFAULT_INTERVAL = _int('DEFAULT_INTERVAL', 5)
    DEFAULT_THRESHOLD = _int('DEFAULT_THRESHOLD', 3)
    PROBE_TIMEOUT = _timeout('PROBE_TIMEOUT', 10.0)
    ACTION_TIMEOUT = _timeout('ACTION_TIMEOUT', None)
    RESET_POLICY = os.getenv('RESET_POLICY', 'rearm').strip().lower()
    USER_AGENT = os.getenv('USER_AGENT', 'UptimeChecker')


class TestConfig(Config):
    __test__ = False

    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    WTF_CSRF_ENABLED = False
    LOG_DIR = None
    TICK_SECONDS = 1


def check_config(config):
    """Validate values that can only be checked once the config is assembled."""
    policy = config.get('RESET_POLICY')
    if policy not in POLICIES:
        raise ConfigError(f"RESET_POLICY must be one of {', '.join(POLICIES)}, got {policy!r}")
    for key in ('TICK_SECONDS', 'DEFAULT_INTERVAL', 'DEFAULT_THRESHOLD'):
        value = config.get(key)
        if not isinstance(value, int) or value < 1:
            raise ConfigError(f'{key} must be a positive integer, got {value!r}')
