"""Tests for key classification."""

import pytest

from storage_dashboard.keys import KeyCategory, classify_key, is_composer_data, key_type


@pytest.mark.parametrize(
    "key,category",
    [
        ("workbench.panel.aichat.view.aichat.chatdata", KeyCategory.CHAT_DATA),
        ("composer.composerData", KeyCategory.COMPOSER_METADATA),
        ("bubbleId:abc", KeyCategory.CHAT_MESSAGE),
        ("checkpointId:1:2", KeyCategory.CHECKPOINT),
        ("codeBlockDiff:xyz", KeyCategory.CODE_DIFF),
        ("messageRequestContext:42", KeyCategory.MESSAGE_CONTEXT),
        ("composerData:xyz", KeyCategory.COMPOSER_DATA),
        ("unrelated", KeyCategory.UNKNOWN),
        ("", KeyCategory.UNKNOWN),
    ],
)
def test_classify_key(key, category):
    assert classify_key(key) is category


def test_exact_match_is_not_a_prefix_match():
    """Exact keys only match exactly."""
    assert classify_key("composer.composerData.backup") is KeyCategory.UNKNOWN
    assert classify_key("workbench.panel.aichat.view.aichat.chatdata2") is KeyCategory.UNKNOWN


def test_prefix_is_case_sensitive():
    assert classify_key("BubbleId:abc") is KeyCategory.UNKNOWN


def test_category_labels():
    assert KeyCategory.CHAT_MESSAGE.value == "Chat Message"
    assert KeyCategory.COMPOSER_METADATA.value == "Composer Metadata"


@pytest.mark.parametrize(
    "key,expected",
    [
        ("bubbleId:abc:def", "bubbleId"),
        ("checkpointId:1", "checkpointId"),
        ("someSetting", "someSetting"),
        (":orphan", "unknown"),
        ("", "unknown"),
    ],
)
def test_key_type(key, expected):
    assert key_type(key) == expected


def test_is_composer_data():
    assert is_composer_data("composerData:123")
    assert not is_composer_data("composer.composerData")
