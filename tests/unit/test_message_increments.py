"""Tests for +semver directives in commit messages."""

import pytest

from mainver.config import MessageIncrementConfig
from mainver.mainline import MessageIncrementParser
from mainver.models import IncrementStrategy


class TestMessageIncrementParser:
    @pytest.fixture
    def parser(self) -> MessageIncrementParser:
        return MessageIncrementParser()

    @pytest.mark.parametrize(
        "message,expected",
        [
            ("Drop legacy API\n\n+semver: breaking", IncrementStrategy.MAJOR),
            ("+semver: major", IncrementStrategy.MAJOR),
            ("Add search +semver:feature", IncrementStrategy.MINOR),
            ("+SEMVER: Minor", IncrementStrategy.MINOR),
            ("Fix crash +semver: fix", IncrementStrategy.PATCH),
            ("Update docs +semver: skip", IncrementStrategy.NONE),
            ("+semver: none", IncrementStrategy.NONE),
        ],
    )
    def test_directives(self, parser, message, expected):
        assert parser.parse(message) == expected

    def test_plain_message(self, parser):
        assert parser.parse("Refactor the walker") is None
        assert parser.parse("") is None

    def test_largest_directive_wins(self, parser):
        assert parser.parse("+semver: patch\n+semver: major") == IncrementStrategy.MAJOR

    def test_order_in_message_does_not_matter(self, parser):
        assert parser.parse("+semver: major\n+semver: patch") == IncrementStrategy.MAJOR

    def test_none_loses_to_other_directives(self, parser):
        assert parser.parse("+semver: none\n+semver: minor") == IncrementStrategy.MINOR

    def test_disabled(self):
        parser = MessageIncrementParser(MessageIncrementConfig(enabled=False))
        assert parser.parse("+semver: major") is None

    def test_custom_pattern(self):
        parser = MessageIncrementParser(MessageIncrementConfig(major=r"^BREAKING CHANGE"))
        assert parser.parse("BREAKING CHANGE: new format") == IncrementStrategy.MAJOR
        assert parser.parse("+semver: major") is None
