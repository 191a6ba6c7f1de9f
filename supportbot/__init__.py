"""Scripted customer-support chat widget: rule-based replies and widget state."""

from .conversation import ChatWidget, Message, Sender
from .resolver import ResponseResolver, resolve
from .scheduling import AsyncioScheduler, PollingScheduler
from .skins import GENERIC, NIBBLY, SKINS, Skin, get_skin
from .tracking import DeliveryStatus, TrackingRecord, load_tracking_records

__version__ = "0.1.0"

__all__ = [
    "AsyncioScheduler",
    "ChatWidget",
    "DeliveryStatus",
    "GENERIC",
    "Message",
    "NIBBLY",
    "PollingScheduler",
    "ResponseResolver",
    "SKINS",
    "Sender",
    "Skin",
    "TrackingRecord",
    "get_skin",
    "load_tracking_records",
    "resolve",
]
