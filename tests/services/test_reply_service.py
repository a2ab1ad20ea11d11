"""Tests for ReplyService."""

import pytest

from video_studio.core.config import RepliesConfig, ReplyRule
from video_studio.services.reply_service import ReplyService


@pytest.mark.parametrize(
    "text,rule",
    [
        ("hello there", "greeting"),
        ("Can you give me some ideas?", "ideas"),
        ("what can you do", "capabilities"),
        ("thanks!", "thanks"),
        ("the weather is nice", "fallback"),
    ],
)
def test_rule_selection(reply_service, text, rule):
    name, reply = reply_service.compose(text)

    assert name == rule
    assert reply


def test_first_matching_rule_wins():
    service = ReplyService(
        RepliesConfig(
            rules=[
                ReplyRule(name="first", keywords=["hi"], reply="one"),
                ReplyRule(name="second", keywords=["hi"], reply="two"),
            ],
            fallback="none",
        )
    )

    assert service.compose("hi") == ("first", "one")
    assert service.compose("bye") == ("fallback", "none")
