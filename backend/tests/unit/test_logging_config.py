"""
Unit tests for logging setup.
"""

import logging

from character_nexus.core.logging_config import REDACTED, SensitiveDataFilter, setup_logging


def _record(msg, args=(), **extra):
    record = logging.LogRecord("test", logging.INFO, __file__, 1, msg, args, None)
    record.__dict__.update(extra)
    return record


def test_filter_masks_dict_arguments():
    record = _record("payload %s", ({"name": "Aria", "Token": "abc", "nested": {"password": "x"}},))

    assert SensitiveDataFilter().filter(record)

    assert record.args[0] == {"name": "Aria", "Token": REDACTED, "nested": {"password": REDACTED}}


def test_filter_masks_extra_attributes():
    record = _record("login", authorization="Bearer abc", user="sam")

    SensitiveDataFilter().filter(record)

    assert record.authorization == REDACTED
    assert record.user == "sam"


def test_filter_leaves_plain_messages_alone():
    record = _record("Imported %d characters", (3,))

    SensitiveDataFilter().filter(record)

    assert record.getMessage() == "Imported 3 characters"


def test_setup_logging_installs_one_handler():
    root = logging.getLogger()
    original_handlers = list(root.handlers)
    original_level = root.level
    try:
        setup_logging("debug")
        setup_logging("warning")

        filtered = [
            h for h in root.handlers if any(isinstance(f, SensitiveDataFilter) for f in h.filters)
        ]
        assert len(filtered) == 1
        assert root.level == logging.WARNING
    finally:
        root.handlers = original_handlers
        root.setLevel(original_level)
