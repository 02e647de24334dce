"""Per-site failure tracking.

A site moves between four states driven by probe outcomes:

    HEALTHY       failures == 0
    DEGRADED      0 < failures < threshold
    ALERTING      failures >= threshold, recovery command not yet run
    ACTION_FIRED  failures >= threshold, command already run this outage

Any UP result returns the site to HEALTHY. Reaching the threshold runs the
site's command once. What happens after that depends on the reset policy:

``rearm``
    A successful command resets ``failures`` to 0, so an outage that keeps
    going runs the command again after another ``threshold`` failures. A
    failed command is retried when the count reaches the next multiple of
    ``threshold``.

``suppress``
    The command runs at most once per outage, whether it succeeds or not.
    The count keeps growing until the site comes back UP.
"""
import enum
from dataclasses import dataclass
from typing import Optional

from notifier import get_logger
from prober import Outcome

log = get_logger('tracker')

REARM = 'rearm'
SUPPRESS = 'suppress'


class SiteState(enum.Enum):
    HEALTHY = 'healthy'
    DEGRADED = 'degraded'
    ALERTING = 'alerting'
    ACTION_FIRED = 'action_fired'


def state_of(site):
    if site.failures == 0:
        return SiteState.HEALTHY
    if site.failures < site.threshold:
        return SiteState.DEGRADED
    if site.action_fired:
        return SiteState.ACTION_FIRED
    return SiteState.ALERTING


@dataclass
class Transition:
    outcome: Outcome
    previous: SiteState
    current: SiteState
    action_invoked: bool = False
    action_succeeded: Optional[bool] = None

    @property
    def recovered(self):
        return self.outcome is Outcome.UP and self.previous is not SiteState.HEALTHY


class FailureTracker:

    def __init__(self, runner, policy=REARM):
        if policy not in (REARM, SUPPRESS):
            raise ValueError(f"unknown reset policy: {policy!r}")
        self.runner = runner
        self.policy = policy

    def record(self, site, outcome):
        if outcome is Outcome.UP:
            return self._up(site)
        return self._down(site)

    def _up(self, site):
        previous = state_of(site)
        site.failures = 0
        site.action_fired = False
        if previous is not SiteState.HEALTHY:
            log.info(f"{site.url} is back UP")
        return Transition(Outcome.UP, previous, SiteState.HEALTHY)

    def _down(self, site):
        previous = state_of(site)
        site.failures += 1
        log.warning(f"{site.url} is DOWN (Failure {site.failures}/{site.threshold})")

        if site.failures < site.threshold:
            return Transition(Outcome.DOWN, previous, SiteState.DEGRADED)

        if site.action_fired:
            if self.policy == REARM and site.failures % site.threshold == 0:
                # retry a command that failed one threshold window ago
                site.action_fired = False
            else:
                return Transition(Outcome.DOWN, previous, SiteState.ACTION_FIRED)

        return self._fire(site, previous)

    def _fire(self, site, previous):
        if not site.command:
            log.warning(f"{site.url} reached {site.threshold} failures, no command configured")
            site.action_fired = True
            return Transition(Outcome.DOWN, previous, SiteState.ACTION_FIRED)

        log.info(f"Running command: {site.command}")
        try:
            ok = bool(self.runner(site.command))
        except Exception as e:
            log.error(f"Command runner raised for {site.url}: {e}", exc_info=True)
            ok = False

        if not ok:
            log.error("Command execution failed")
            site.action_fired = True
            return Transition(Outcome.DOWN, previous, SiteState.ACTION_FIRED, True, False)

        log.info("Command executed successfully")
        if self.policy == SUPPRESS:
            site.action_fired = True
            return Transition(Outcome.DOWN, previous, SiteState.ACTION_FIRED, True, True)

        site.failures = 0
        site.action_fired = False
        log.info("Reset failure count to 0 after command execution")
        # the command ran from ALERTING; the counter is rearmed for the next window
        return Transition(Outcome.DOWN, previous, SiteState.ALERTING, True, True)
