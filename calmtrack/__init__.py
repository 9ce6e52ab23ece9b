"""calmtrack: behavioral telemetry engine producing anxiety snapshots."""

__version__ = "0.1.0"

from .config import Config, load_config
from .engine import BehaviorEngine, TrackingState
from .event_bus import Subscription
from .models import AnxietySnapshot, SubMetrics, Trend

__all__ = [
    "__version__",
    "AnxietySnapshot",
    "BehaviorEngine",
    "Config",
    "Subscription",
    "SubMetrics",
    "TrackingState",
    "Trend",
    "load_config",
]
