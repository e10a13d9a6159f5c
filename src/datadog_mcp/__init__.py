"""Datadog MCP - Read-only Datadog API tools for agents.

Exposes:
- Monitors (list, detail)
- Dashboards (list, definition)
- Metrics (search, metadata)
- Events
- Incidents
- Logs (search, aggregate)
- APM spans (search, aggregate, full trace)
"""

__version__ = "1.0.0"
