import logging
from typing import Any, Dict, List, Optional

from edubridge.repositories.message_repository import MessageGroupRepository, MessageRepository
from edubridge.repositories.user_repository import UserRepository
from edubridge.schemas.common import UserSummary
from edubridge.schemas.message import (
    ConversationOut,
    GroupCreate,
    GroupOut,
    InboxEntry,
    MessageCreate,
    MessageOut,
)
from edubridge.services.conversations import aggregate_conversations, build_inbox, sort_by_recency
from edubridge.utils.errors import ForbiddenError, NotFoundError, ValidationError
from edubridge.utils.realtime_bus import notify_users


logger = logging.getLogger(__name__)


class MessageService:

    def __init__(
        self,
        message_repo: MessageRepository,
        group_repo: MessageGroupRepository,
        user_repo: UserRepository,
    ) -> None:
        self._message_repo = message_repo
        self._group_repo = group_repo
        self._user_repo = user_repo

    async def send_message(self, sender_id: str, data: MessageCreate) -> MessageOut:
        content = data.content.strip()
        if data.group_id:
            group = await self._group_repo.get_by_id(data.group_id)
            if not group:
                raise NotFoundError("Message group not found")
            if sender_id not in group.get("member_ids", []):
                raise ForbiddenError("You are not a member of this group")
            saved = await self._message_repo.save_message(sender_id, content, group_id=group["_id"])
            await self._group_repo.touch(group["_id"])
            recipients = group.get("member_ids", [])
        else:
            if data.receiver_id == sender_id:
                raise ValidationError("You cannot send a message to yourself")
            if not await self._user_repo.get_by_id(data.receiver_id):
                raise NotFoundError("Receiver not found")
            saved = await self._message_repo.save_message(sender_id, content, receiver_id=data.receiver_id)
            recipients = [data.receiver_id]

        message = MessageOut.from_doc(saved)
        await notify_users(recipients, "message", {"message": message.model_dump(mode="json")}, exclude=sender_id)
        return message

    async def open_thread(self, user_id: str, partner_id: str) -> List[MessageOut]:
        """Direct messages with `partner_id`, oldest first; the partner's messages become read."""
        messages = await self._message_repo.get_thread(user_id, partner_id)
        profiles = await self._user_repo.get_profiles([user_id, partner_id])
        await self.mark_read(user_id, partner_id)
        return [MessageOut.from_doc(m, sender=_summary(profiles.get(m["sender_id"]))) for m in messages]

    async def mark_read(self, user_id: str, partner_id: str) -> int:
        updated = await self._message_repo.mark_read(receiver_id=user_id, sender_id=partner_id)
        if updated:
            await notify_users([partner_id], "read", {"by": user_id, "count": updated})
        return updated

    async def unread_total(self, user_id: str) -> int:
        return await self._message_repo.count_unread(user_id)

    async def list_conversations(self, user_id: str) -> List[ConversationOut]:
        return [_conversation_out(c) for c in await self._conversations(user_id)]

    async def create_group(self, created_by_id: str, data: GroupCreate) -> GroupOut:
        member_ids = [created_by_id] + [m for m in dict.fromkeys(data.member_ids) if m != created_by_id]
        profiles = await self._user_repo.get_profiles(member_ids)
        missing = [m for m in member_ids if m not in profiles and m != created_by_id]
        if missing:
            raise NotFoundError(f"Unknown member(s): {', '.join(missing)}")
        group = await self._group_repo.create_group(data.name.strip(), created_by_id, member_ids, data.program_id)
        logger.info("Message group %s created by %s with %d members", group["_id"], created_by_id, len(member_ids))
        return GroupOut.from_doc(group, member_count=len(member_ids))

    async def list_groups(self, user_id: str) -> List[GroupOut]:
        groups = await self._group_repo.list_for_member(user_id)
        latest = await self._message_repo.latest_for_groups([g["_id"] for g in groups])
        return [
            GroupOut.from_doc(
                g,
                member_count=len(g.get("member_ids", [])),
                last_message=MessageOut.from_doc(latest[g["_id"]]) if g["_id"] in latest else None,
            )
            for g in groups
        ]

    async def group_messages(self, user_id: str, group_id: str) -> List[MessageOut]:
        group = await self._group_repo.get_by_id(group_id)
        if not group:
            raise NotFoundError("Message group not found")
        if user_id not in group.get("member_ids", []):
            raise ForbiddenError("You are not a member of this group")
        messages = await self._message_repo.get_group_messages(group_id)
        profiles = await self._user_repo.get_profiles([m["sender_id"] for m in messages])
        return [MessageOut.from_doc(m, sender=_summary(profiles.get(m["sender_id"]))) for m in messages]

    async def inbox(self, user_id: str) -> List[InboxEntry]:
        conversations = await self._conversations(user_id)
        groups = await self._group_repo.list_for_member(user_id)
        latest = await self._message_repo.latest_for_groups([g["_id"] for g in groups])
        entries = build_inbox(conversations, groups, latest)
        return [
            InboxEntry(**{**e, "last_message": MessageOut.from_doc(e["last_message"]) if e["last_message"] else None})
            for e in entries
        ]

    async def _conversations(self, user_id: str) -> List[Dict[str, Any]]:
        messages = await self._message_repo.get_direct_messages(user_id)
        partner_ids = {m["sender_id"] for m in messages} | {m["receiver_id"] for m in messages if m.get("receiver_id")}
        partner_ids.discard(user_id)
        profiles = await self._user_repo.get_profiles(list(partner_ids))
        return sort_by_recency(aggregate_conversations(user_id, messages, profiles))


def _summary(profile: Optional[dict]) -> Optional[UserSummary]:
    return UserSummary(**profile) if profile else None


def _conversation_out(convo: Dict[str, Any]) -> ConversationOut:
    return ConversationOut(
        partner_id=convo["partner_id"],
        partner=UserSummary(**convo["partner"]),
        last_message=MessageOut.from_doc(convo["last_message"]),
        unread_count=convo["unread_count"],
    )
