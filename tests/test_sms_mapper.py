from __future__ import annotations

import pytest

from voucherkeeper.adapters.sms_mapper import SmsPart, combine_parts, message_from_dict


def test_combine_parts_joins_bodies_in_timestamp_order() -> None:
    parts = [
        SmsPart(originating_address="+972501234567", body=" קוד: ABCD1234", timestamp=2000),
        SmsPart(originating_address="+972501234567", body="קיבלת שובר!", timestamp=1000),
    ]
    [message] = combine_parts(parts)
    assert message.body_text == "קיבלת שובר! קוד: ABCD1234"
    assert message.timestamp == 1000
    assert message.sender_phone == "+972501234567"


def test_combine_parts_groups_by_sender_and_drops_empty_address() -> None:
    parts = [
        SmsPart(originating_address="111", body="a", timestamp=1),
        SmsPart(originating_address="", body="lost", timestamp=1),
        SmsPart(originating_address="222", body="b", timestamp=1),
        SmsPart(originating_address="111", body="c", timestamp=2),
    ]
    messages = combine_parts(parts)
    assert [(m.sender_phone, m.body_text) for m in messages] == [("111", "ac"), ("222", "b")]


def test_combine_parts_sender_name_only_when_different_from_phone() -> None:
    parts = [
        SmsPart(originating_address="0501234567", body="x", timestamp=1, display_originating_address="0501234567"),
        SmsPart(originating_address="0509999999", body="y", timestamp=1, display_originating_address="Shufersal"),
    ]
    first, second = combine_parts(parts)
    assert first.sender_name is None
    assert second.sender_name == "Shufersal"


def test_message_from_dict_defaults() -> None:
    message = message_from_dict({"sender_phone": " 0501234567 ", "sender_name": "0501234567"})
    assert message.sender_phone == "0501234567"
    assert message.sender_name is None
    assert message.body_text == ""
    assert message.timestamp == 0


def test_message_from_dict_requires_sender_phone() -> None:
    with pytest.raises(ValueError):
        message_from_dict({"body_text": "hello"})


def test_message_from_dict_ignores_non_string_sender_name() -> None:
    message = message_from_dict({"sender_phone": "0501234567", "sender_name": 123, "body_text": "hi"})
    assert message.sender_name is None
    assert message_from_dict({"sender_phone": "0501234567", "sender_name": ["x"]}).sender_name is None
    assert message_from_dict({"sender_phone": "0501234567", "sender_name": "Cibus"}).sender_name == "Cibus"
