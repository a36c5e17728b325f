"""Unified chat view — pure projection over a loaded set of rooms.

Rooms that share a participant pair (a direct room plus one project room per
job the two worked on) are shown as one conversation. The unified entry is
keyed by the pair, which is NOT a room id: anything that writes must first
resolve a concrete room with resolve_send_target.
"""

from collections.abc import Iterable

from src.sb_chat.domain.models import ChatRoom, UnifiedChatRoom
from src.sb_common.datetime_utils import to_epoch_millis
from src.sb_common.errors import UnresolvedSendTargetError

PAIR_KEY_SEPARATOR = "_"


def pair_key(participants: Iterable[str]) -> str:
    return PAIR_KEY_SEPARATOR.join(sorted(participants))


def _last_ts(room: ChatRoom) -> int:
    return to_epoch_millis(room.last_message.timestamp if room.last_message else None)


def unify_rooms(
    rooms: Iterable[ChatRoom], include_empty: bool = False
) -> list[UnifiedChatRoom]:
    """Group rooms by participant pair, newest conversation first.

    Rooms without any message are left out unless `include_empty` is set, in
    which case conversations with no message at all sort last. Within a group
    the room with the latest message is the representative; ties keep the
    first one seen.
    """
    groups: dict[str, list[ChatRoom]] = {}
    for room in rooms:
        if room.last_message is None and not include_empty:
            continue
        groups.setdefault(pair_key(room.participants), []).append(room)

    unified = []
    for key, members in groups.items():
        representative = members[0]
        for room in members[1:]:
            if _last_ts(room) > _last_ts(representative):
                representative = room
        lo, hi = sorted(representative.participants)
        unified.append(
            UnifiedChatRoom(
                id=key,
                participants=(lo, hi),
                representative=representative,
                source_room_ids=tuple(r.id for r in members),
                rooms=tuple(members),
            )
        )

    unified.sort(key=lambda u: _last_ts(u.representative), reverse=True)
    return unified


def resolve_send_target(unified: UnifiedChatRoom, request_id: str | None = None) -> str:
    """Pick the concrete room a message typed into `unified` should go to.

    The project room of `request_id` when given and present, else the direct
    room, else the representative. Always a member of source_room_ids.
    """
    if request_id is not None:
        for room in unified.rooms:
            if room.is_project_chat and room.request_id == request_id:
                return room.id
    for room in unified.rooms:
        if not room.is_project_chat:
            return room.id
    target = unified.representative.id
    if target not in unified.source_room_ids:
        raise UnresolvedSendTargetError(unified.id)
    return target
