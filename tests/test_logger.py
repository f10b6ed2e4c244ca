"""Tests for log secret redaction."""

import logging

from votebot.utils.logger import SecretRedactingFilter


def _record(msg, *args):
    return logging.LogRecord("votebot", logging.ERROR, __file__, 1, msg, args, None)


def test_masks_secret_in_formatted_message():
    record = _record("GET %s failed", "https://minecraft-mp.com/api/?key=s3cr3t&format=json")

    assert SecretRedactingFilter("s3cr3t").filter(record)
    assert record.getMessage() == "GET https://minecraft-mp.com/api/?key=***&format=json failed"


def test_leaves_clean_messages_alone():
    record = _record("Sync decision for %s", "srv-1")

    SecretRedactingFilter("s3cr3t", "").filter(record)

    assert record.msg == "Sync decision for %s"
    assert record.getMessage() == "Sync decision for srv-1"
