from dataclasses import dataclass
from typing import Dict, Optional, Tuple

# =========================
# Building blocks
# =========================
@dataclass(frozen=True)
class QuickAction:
    key: str
    label: str
    query: str


@dataclass(frozen=True)
class KeywordRule:
    """Every group needs at least one of its terms present in the text."""
    groups: Tuple[Tuple[str, ...], ...]
    reply: str

    def matches(self, text: str) -> bool:
        return all(any(term in text for term in group) for group in self.groups)


RuleTable = Tuple[Tuple[str, str], ...]


def rule_table(*entries: Tuple[str, str]) -> RuleTable:
    # Triggers are kept as written and matched against lowercased input,
    # so a trigger with capitals ("I need help") never matches.
    return tuple(entries)


@dataclass(frozen=True)
class Skin:
    name: str
    title: str
    status_line: str
    footer_note: str
    greeting: str
    rules: RuleTable
    keyword_rules: Tuple[KeywordRule, ...]
    default_reply: str
    quick_actions: Tuple[QuickAction, ...]
    tracks_orders: bool = False

    def quick_action(self, key: str) -> QuickAction:
        for action in self.quick_actions:
            if action.key == key:
                return action
        raise KeyError(f"Unknown quick action {key!r} for skin {self.name!r}")


# =========================
# Customer Support (generic)
# =========================
GENERIC = Skin(
    name="generic",
    title="Customer Support",
    status_line="Online • Typically replies instantly",
    footer_note="Our team typically responds within a few minutes during business hours",
    greeting=(
        "Hello! I'm your customer service assistant. I'm here to help with orders, billing, "
        "returns, and any other questions you might have. How can I assist you today?"
    ),
    rules=rule_table(
        ("track my order",
         "I'd be happy to help you track your order! Please provide your order number "
         "(usually starts with #) and I'll look it up for you right away."),
        ("billing question",
         "I can help with billing inquiries. Are you looking to update payment information, "
         "view invoices, or resolve a billing issue? Please let me know more details."),
        ("I need help",
         "I'm here to help! I can assist with order tracking, billing questions, account issues, "
         "product information, returns, and more. What specific area can I help you with today?"),
        ("hello",
         "Hello! Welcome to our customer support. I'm here to help you with any questions or "
         "concerns. How can I assist you today?"),
        ("hi",
         "Hi there! Thanks for reaching out. I'm your customer service assistant. "
         "What can I help you with today?"),
        ("refund",
         "I understand you're looking for information about refunds. Our refund policy allows "
         "returns within 30 days of purchase. Could you please provide your order number so I "
         "can check the details for you?"),
        ("return",
         "I can help you with returns! Items can be returned within 30 days in original "
         "condition. Do you have your order number handy? This will help me process your "
         "return request faster."),
        ("cancel order",
         "I can help you cancel your order if it hasn't shipped yet. Please provide your order "
         "number and I'll check the status right away."),
        ("shipping",
         "I can provide shipping information! Are you asking about shipping costs, delivery "
         "times, or tracking an existing shipment? Please let me know your specific question."),
        ("account",
         "I can help with account-related questions. Are you having trouble logging in, need to "
         "update your information, or have other account concerns?"),
        ("password",
         "If you're having trouble with your password, I can guide you through resetting it. "
         "Please check your email for a password reset link, or let me know if you need me to "
         "send another one."),
    ),
    keyword_rules=(
        KeywordRule(
            (("order",), ("status",)),
            "I can help you check your order status. Please provide your order number and I'll "
            "look it up immediately.",
        ),
        KeywordRule(
            (("cancel", "cancelled"),),
            "I understand you want to cancel something. Could you specify if it's an order, "
            "subscription, or service? I'll help you with the cancellation process.",
        ),
        KeywordRule(
            (("thank",),),
            "You're very welcome! I'm glad I could help. Is there anything else I can assist you "
            "with today?",
        ),
        KeywordRule(
            (("bye", "goodbye"),),
            "Thank you for contacting us! Have a wonderful day and don't hesitate to reach out if "
            "you need any further assistance.",
        ),
    ),
    default_reply=(
        "I understand your concern. Let me connect you with the right information. Could you "
        "provide more details about your specific issue? This will help me assist you better."
    ),
    quick_actions=(
        QuickAction("track-order", "Track Order", "track my order"),
        QuickAction("billing", "Billing", "billing question"),
        QuickAction("help", "Help", "I need help"),
    ),
)

# =========================
# Nibbly (drone delivery)
# =========================
NIBBLY = Skin(
    name="nibbly",
    title="Nibbly Support",
    status_line="Online • Drones in the air",
    footer_note="Have your order code handy (it looks like N001) for the fastest help",
    greeting=(
        "Hi! I'm the Nibbly assistant. I can track your drone delivery, help with billing, "
        "refunds and your account. Share your order code (like N001) to see where your food is!"
    ),
    rules=rule_table(
        ("track my order",
         "I'd be happy to track your Nibbly delivery! Please share your order code. It starts "
         "with N followed by three digits, for example N001."),
        ("billing question",
         "I can help with billing. Are you looking to update your payment method, view receipts, "
         "or query a charge? Let me know a few more details."),
        ("I need help",
         "I'm here to help! I can track drone deliveries, answer billing questions, sort out "
         "refunds and account issues. What can I help you with today?"),
        ("hello",
         "Hello! Welcome to Nibbly support. How can I help with your delivery today?"),
        ("hi",
         "Hi there! Thanks for reaching out to Nibbly. What can I help you with today?"),
        ("refund",
         "Sorry to hear something went wrong. Refunds are available for orders that arrive "
         "late or damaged. Please share your order code so I can check it for you."),
        ("return",
         "Food orders can't be returned, but if something was wrong with your delivery I can "
         "arrange a refund. What's your order code?"),
        ("cancel order",
         "Orders can be cancelled until the drone takes off. Please share your order code and "
         "I'll check whether it's still being prepared."),
        ("delivery area",
         "Nibbly drones currently deliver within a 5 km radius of each partner kitchen. Enter "
         "your address in the app to check coverage."),
        ("account",
         "I can help with your Nibbly account. Are you having trouble logging in, or do you need "
         "to update your delivery address or details?"),
        ("password",
         "To reset your password, tap 'Forgot password' on the Nibbly login screen and we'll "
         "email you a reset link."),
    ),
    keyword_rules=(
        KeywordRule(
            (("order",), ("status",)),
            "I can check your order status right away. Please share your order code (for example "
            "N001).",
        ),
        KeywordRule(
            (("drone",),),
            "Our drones fly at low altitude along approved routes and lower your order gently to "
            "your drop point. If you share your order code I can tell you where yours is.",
        ),
        KeywordRule(
            (("how long", "when will", "arrive", "arrival"),),
            "Most Nibbly deliveries arrive within 15-25 minutes of ordering. Share your order code "
            "and I'll give you a live ETA.",
        ),
        KeywordRule(
            (("cancel", "cancelled"),),
            "I understand you want to cancel something. Is it an order or your Nibbly Plus "
            "subscription? I'll help you with the cancellation.",
        ),
        KeywordRule(
            (("thank",),),
            "You're very welcome! Enjoy your meal, and let me know if there's anything else I can "
            "do.",
        ),
        KeywordRule(
            (("bye", "goodbye"),),
            "Thanks for chatting with Nibbly! Happy eating, and reach out any time.",
        ),
    ),
    default_reply=(
        "I want to make sure I get this right. Could you give me a bit more detail? If it's about "
        "a delivery, including your order code (like N001) helps a lot."
    ),
    quick_actions=(
        QuickAction("track-order", "Track Order", "track my order"),
        QuickAction("delivery-time", "Delivery Time", "when will my food arrive"),
        QuickAction("help", "Help", "I need help"),
    ),
    tracks_orders=True,
)

SKINS: Dict[str, Skin] = {skin.name: skin for skin in (GENERIC, NIBBLY)}


def get_skin(name: Optional[str]) -> Skin:
    key = (name or GENERIC.name).strip().lower()
    try:
        return SKINS[key]
    except KeyError:
        raise ValueError(f"Unknown skin {name!r}; expected one of {sorted(SKINS)}") from None
