"""
Collector component - receives engine output events over HTTP.
"""

from .component import DEFAULT_COLLECTOR_HOST, DEFAULT_COLLECTOR_PORT, ResponseCollector

__all__ = [
    "DEFAULT_COLLECTOR_HOST",
    "DEFAULT_COLLECTOR_PORT",
    "ResponseCollector",
]
