"""
Deadline checker.

Looks for projects whose deadline is 4 days or 1 day away, stores a
``DEADLINE`` notification for the team leaders and assigned users, then emits
``deadlineAlert`` on the team channel. Started from the application lifespan
when ``INIT_MODE == "runtime"``.
"""

import asyncio
import logging
from datetime import datetime

from starlette.concurrency import run_in_threadpool

from teamhub.api.models import DeadlineAlert
from teamhub.database.core import notifications
from teamhub.database.helpers.timeutils import utcnow
from teamhub.realtime.hub import RealtimeHub, team_channel

logger = logging.getLogger(__name__)

DEADLINE_ALERT = "deadlineAlert"


async def check_deadlines(hub: RealtimeHub, now: datetime | None = None) -> list[DeadlineAlert]:
    """
    Run one deadline pass.

    Parameters
    ----------
    hub : RealtimeHub
        Registry used to emit the alerts.
    now : datetime | None
        Reference time; defaults to the current UTC time.

    Returns
    -------
    list[DeadlineAlert]
        The alerts that were stored and emitted.
    """
    alerts = await run_in_threadpool(notifications.collect_deadline_alerts, now=now or utcnow())
    for alert in alerts:
        await hub.emit(team_channel(alert.team_id), DEADLINE_ALERT, alert.to_payload())
    logger.info("deadline.check_done alerts=%s", len(alerts))
    return alerts


async def run_deadline_checker(hub: RealtimeHub, interval_seconds: int) -> None:
    """Call `check_deadlines` every `interval_seconds` until cancelled."""
    while True:
        try:
            await check_deadlines(hub)
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("deadline.check_failed")
        await asyncio.sleep(interval_seconds)
