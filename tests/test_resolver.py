from __future__ import annotations

import pytest

from supportbot.resolver import ResponseResolver, resolve
from supportbot.skins import GENERIC, NIBBLY, get_skin

GENERIC_REPLIES = dict(GENERIC.rules)
NIBBLY_REPLIES = dict(NIBBLY.rules)


def keyword_reply(skin, term: str) -> str:
    return next(rule.reply for rule in skin.keyword_rules if any(term in g for g in rule.groups))


def test_hello_returns_table_reply(generic_resolver: ResponseResolver):
    assert generic_resolver.resolve("hello") == GENERIC_REPLIES["hello"]
    assert generic_resolver.resolve("HELLO there") == GENERIC_REPLIES["hello"]


def test_table_order_beats_input_order(generic_resolver: ResponseResolver):
    # "password" appears first in the text, "refund" first in the table.
    assert generic_resolver.resolve("password reset and refund") == GENERIC_REPLIES["refund"]


def test_substring_matching_is_not_tokenised(generic_resolver: ResponseResolver):
    # "hi" inside "this" and "shipping" still matches, and "hi" precedes "shipping".
    assert generic_resolver.resolve("this is odd") == GENERIC_REPLIES["hi"]
    assert generic_resolver.resolve("shipping costs?") == GENERIC_REPLIES["hi"]
    # No negation handling.
    assert generic_resolver.resolve("I don't want a refund") == GENERIC_REPLIES["refund"]


def test_capitalised_trigger_never_matches_lowercased_input(generic_resolver: ResponseResolver):
    assert GENERIC.rules[2][0] == "I need help"
    assert generic_resolver.resolve("I need help") == GENERIC.default_reply
    assert generic_resolver.resolve("i need help") == GENERIC.default_reply


@pytest.mark.parametrize(
    "text, term",
    [
        ("what is the status of my order", "status"),
        ("I cancelled my subscription", "cancel"),
        ("thanks a lot", "thank"),
        ("ok bye now", "bye"),
    ],
)
def test_keyword_rules(generic_resolver: ResponseResolver, text: str, term: str):
    assert generic_resolver.resolve(text) == keyword_reply(GENERIC, term)


def test_default_reply(generic_resolver: ResponseResolver):
    assert generic_resolver.resolve("xyzzy completely unrelated text") == GENERIC.default_reply
    assert generic_resolver.resolve("") == GENERIC.default_reply


def test_generic_skin_ignores_order_codes(generic_resolver: ResponseResolver):
    assert generic_resolver.resolve("where is N001") == GENERIC.default_reply


def test_order_code_found_takes_priority(nibbly_resolver: ResponseResolver):
    reply = nibbly_resolver.resolve("please track N001 now")
    assert "N001" in reply
    assert "over Riverside Park" in reply
    assert "8 minutes" in reply
    assert "in flight" in reply

    # Table triggers in the same text do not win.
    assert nibbly_resolver.resolve("hello, billing question about N001") == reply
    assert nibbly_resolver.resolve("track my order n001") == reply


def test_unknown_order_code_gets_not_found_reply(nibbly_resolver: ResponseResolver):
    reply = nibbly_resolver.resolve("status of N999")
    assert "N999" in reply
    assert "couldn't find" in reply
    assert reply != NIBBLY.default_reply


def test_four_digit_code_is_not_an_order_code(nibbly_resolver: ResponseResolver):
    assert nibbly_resolver.resolve("where is N0012") == NIBBLY.default_reply
    assert nibbly_resolver.resolve("hello N0012") == NIBBLY_REPLIES["hello"]


def test_delivered_order_wording(nibbly_resolver: ResponseResolver):
    reply = nibbly_resolver.resolve("where is n003?")
    assert "has been delivered" in reply
    assert "at your drop point" in reply


def test_nibbly_specific_keyword_rules(nibbly_resolver: ResponseResolver):
    assert nibbly_resolver.resolve("when will my food arrive") == keyword_reply(NIBBLY, "when will")
    assert nibbly_resolver.resolve("is the drone safe") == keyword_reply(NIBBLY, "drone")
    assert nibbly_resolver.resolve("track my order") == NIBBLY_REPLIES["track my order"]


def test_resolve_is_deterministic_and_pure(nibbly_resolver: ResponseResolver):
    before = dict(nibbly_resolver.tracking)
    first = nibbly_resolver.resolve("status of N001")
    assert nibbly_resolver.resolve("status of N001") == first
    assert nibbly_resolver("status of N001") == first
    assert dict(nibbly_resolver.tracking) == before


def test_module_level_resolve_uses_packaged_tracking():
    assert resolve("hello") == GENERIC_REPLIES["hello"]
    assert "over Riverside Park" in resolve("track N001", skin="nibbly")


def test_unknown_skin_is_rejected():
    with pytest.raises(ValueError):
        get_skin("pirate")
