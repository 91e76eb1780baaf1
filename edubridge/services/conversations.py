"""Derived views over direct and group messages.

Nothing here touches the database: the message service loads the documents
and hands them over, so the grouping rules can be reasoned about (and tested)
on plain dicts.
"""
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional


def partner_of(message: Mapping[str, Any], user_id: str) -> Optional[str]:
    """The other participant of a direct message, from `user_id`'s side."""
    if message.get("sender_id") == user_id:
        return message.get("receiver_id")
    return message.get("sender_id")


def _is_unread_from(message: Mapping[str, Any], partner_id: str) -> bool:
    return message.get("sender_id") == partner_id and not message.get("is_read", False)


def aggregate_conversations(
    user_id: str,
    messages: Iterable[Mapping[str, Any]],
    profiles: Mapping[str, Mapping[str, Any]],
) -> List[Dict[str, Any]]:
    """Group direct messages by conversation partner.

    Each entry carries the partner profile, the newest message exchanged with
    them and how many of the partner's messages are still unread. Input order
    does not matter: the newest message is picked by `created_at`. Messages
    whose partner is missing (null id, or a user that no longer exists) are
    skipped.
    """
    conversations: Dict[str, Dict[str, Any]] = {}

    for message in messages:
        if message.get("group_id"):
            continue
        partner_id = partner_of(message, user_id)
        if not partner_id or partner_id not in profiles:
            continue

        entry = conversations.get(partner_id)
        if entry is None:
            conversations[partner_id] = {
                "partner_id": partner_id,
                "partner": profiles[partner_id],
                "last_message": message,
                "unread_count": 1 if _is_unread_from(message, partner_id) else 0,
            }
            continue

        if message["created_at"] > entry["last_message"]["created_at"]:
            entry["last_message"] = message
        if _is_unread_from(message, partner_id):
            entry["unread_count"] += 1

    return list(conversations.values())


def sort_by_recency(conversations: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return sorted(conversations, key=lambda c: c["last_message"]["created_at"], reverse=True)


def build_inbox(
    conversations: Iterable[Mapping[str, Any]],
    groups: Iterable[Mapping[str, Any]],
    latest_group_messages: Mapping[str, Mapping[str, Any]],
) -> List[Dict[str, Any]]:
    """Merge direct conversations and groups into one list, most recent activity first."""
    entries: List[Dict[str, Any]] = []

    for convo in conversations:
        entries.append({
            "kind": "direct",
            "id": convo["partner_id"],
            "name": convo["partner"].get("name"),
            "last_message": convo["last_message"],
            "last_activity": convo["last_message"]["created_at"],
            "unread_count": convo["unread_count"],
            "member_count": None,
        })

    for group in groups:
        latest = latest_group_messages.get(group["_id"])
        activity: datetime = latest["created_at"] if latest else group["created_at"]
        entries.append({
            "kind": "group",
            "id": group["_id"],
            "name": group.get("name"),
            "last_message": latest,
            "last_activity": activity,
            "unread_count": 0,
            "member_count": len(group.get("member_ids", [])),
        })

    entries.sort(key=lambda e: e["last_activity"], reverse=True)
    return entries
