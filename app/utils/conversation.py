"""Conversation id helpers shared by the message service and the client."""

from __future__ import annotations

import uuid


def conversation_id(user_a: uuid.UUID | str, user_b: uuid.UUID | str) -> str:
    """Order-independent id for the conversation between two users."""
    first, second = sorted((str(user_a), str(user_b)))
    return f"{first}_{second}"


def other_participant(conv_id: str, user_id: uuid.UUID | str) -> str:
    first, _, second = conv_id.partition("_")
    if str(user_id) == first:
        return second
    if str(user_id) == second:
        return first
    raise ValueError(f"User {user_id} is not part of conversation {conv_id}")
