"""Client-side search behavior and performance telemetry collector."""

from search_tracker.collector import SearchBehaviorCollector as SearchBehaviorCollector
from search_tracker.config import CollectorConfig as CollectorConfig

__version__ = "1.0.0"
