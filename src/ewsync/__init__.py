"""ewsync - Exchange Web Services synchronization and notification client.

ewsync reads incremental synchronization results, sends minimal item
updates, and keeps long-lived streaming notification connections open.
"""

__version__ = "0.1.0"
__author__ = "ewsync contributors"
__description__ = "Exchange Web Services synchronization and streaming notification client"

from ewsync.config import EwsyncConfig, load_config
from ewsync.service import ExchangeService

__all__ = [
    "__version__",
    "__author__",
    "__description__",
    "EwsyncConfig",
    "ExchangeService",
    "load_config",
]
