import logging
from typing import Dict, Mapping, Optional

from .skins import GENERIC, Skin, get_skin
from .tracking import DeliveryStatus, TrackingRecord, extract_order_code, load_tracking_records

logger = logging.getLogger(__name__)


# =========================
# Tracking replies (Nibbly)
# =========================
def tracking_reply(record: TrackingRecord) -> str:
    if record.status is DeliveryStatus.DELIVERED:
        return (
            f"Good news! Order **{record.code}** has been delivered. "
            f"Your drone left it {record.location}. Enjoy your meal!"
        )
    minutes = "minute" if record.eta_minutes == 1 else "minutes"
    return (
        f"Order **{record.code}** is {record.status.label}. "
        f"Your drone is currently {record.location} and should arrive in about "
        f"{record.eta_minutes} {minutes}."
    )


def tracking_not_found_reply(code: str) -> str:
    return (
        f"I couldn't find an order with the code **{code}**. "
        "Please check the code on your confirmation and try again."
    )


# =========================
# Core responder
# =========================
class ResponseResolver:
    """Maps free text to a canned reply for one skin. Pure and total."""

    def __init__(self, skin: Skin = GENERIC, tracking: Optional[Mapping[str, TrackingRecord]] = None):
        self.skin = skin
        self.tracking: Mapping[str, TrackingRecord] = dict(tracking or {})

    def __call__(self, text: str) -> str:
        return self.resolve(text)

    def resolve(self, text: str) -> str:
        message = (text or "").lower()

        # 1) Order code lookup beats everything else
        if self.skin.tracks_orders:
            code = extract_order_code(message)
            if code:
                record = self.tracking.get(code)
                logger.debug("order code %s (%s)", code, "found" if record else "unknown")
                return tracking_reply(record) if record else tracking_not_found_reply(code)

        # 2) Rule table, first trigger in table order wins
        for trigger, reply in self.skin.rules:
            if trigger in message:
                logger.debug("rule table hit: %r", trigger)
                return reply

        # 3) Keyword combinations
        for rule in self.skin.keyword_rules:
            if rule.matches(message):
                logger.debug("keyword rule hit: %r", rule.groups)
                return rule.reply

        return self.skin.default_reply


_RESOLVERS: Dict[str, ResponseResolver] = {}


def resolve(text: str, skin: Optional[str] = None) -> str:
    """One-shot helper using the packaged tracking data for the Nibbly skin."""
    chosen = get_skin(skin)
    if chosen.name not in _RESOLVERS:
        tracking = load_tracking_records() if chosen.tracks_orders else None
        _RESOLVERS[chosen.name] = ResponseResolver(chosen, tracking)
    return _RESOLVERS[chosen.name].resolve(text)
