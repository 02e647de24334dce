class UptimeCheckerError(Exception):
    pass


class ConfigError(UptimeCheckerError):
    pass


class InvalidSiteError(UptimeCheckerError):
    """Rejected site configuration. Nothing is persisted."""


class StoreError(UptimeCheckerError):
    """A write to the site store failed."""
