"""
HTTP API Package for Uptime Probe

aiohttp server that triggers checks and reports liveness.
"""

from api.server import CheckServer, ResultSink

__all__ = [
    "CheckServer",
    "ResultSink",
]
