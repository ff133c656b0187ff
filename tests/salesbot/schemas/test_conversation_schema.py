"""Tests for the derived conversation phase."""

from salesbot.schemas.conversation import (
    Conversation,
    ConversationPhase,
    ConversationStatus,
    Message,
)


def make_conversation(*roles, status=ConversationStatus.ACTIVE):
    return Conversation(
        id="c-1",
        module_id="m-1",
        customer_id="cust-1",
        status=status,
        messages=[
            Message(id=f"msg-{i}", conversation_id="c-1", role=role, content="...")
            for i, role in enumerate(roles)
        ],
    )


def test_empty_conversation_is_new():
    assert make_conversation().phase == ConversationPhase.NEW


def test_user_turn_without_reply_is_still_new():
    assert make_conversation("user").phase == ConversationPhase.NEW


def test_one_reply_means_intro_sent():
    assert make_conversation("user", "assistant").phase == ConversationPhase.INTRO_SENT
    assert (
        make_conversation("user", "assistant", "user").phase
        == ConversationPhase.INTRO_SENT
    )


def test_later_replies_are_steady():
    conversation = make_conversation("user", "assistant", "user", "assistant")
    assert conversation.phase == ConversationPhase.STEADY


def test_closed_wins_over_message_count():
    conversation = make_conversation(
        "user", "assistant", status=ConversationStatus.CLOSED
    )
    assert conversation.phase == ConversationPhase.CLOSED
