"""Datadog tools package."""

from . import monitors
from . import dashboards
from . import metrics
from . import events
from . import incidents
from . import logs
from . import spans

MODULES = [monitors, dashboards, metrics, events, incidents, logs, spans]

__all__ = ["monitors", "dashboards", "metrics", "events", "incidents", "logs", "spans", "MODULES"]
