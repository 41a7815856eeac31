"""
Room management service
房间管理服务 - 读取 → 状态转换 → 持久化 → 生成视图
"""

import json
import logging
import random
from typing import Callable, Optional, Tuple

from pydantic import ValidationError

from impostor.core.config import settings
from impostor.core.exceptions import RoomError, RoomNotFoundError, RoomValidationError, StoreError
from impostor.core.store import KeyValueStore
from impostor.schemas.action import RoomActionRequest, RoomActionType
from impostor.schemas.room import Room, RoomState, normalize_room_record
from impostor.schemas.view import RoomView
from impostor.services import room as transitions
from impostor.services.audit_logger import audit_logger, AuditEventType
from impostor.services.tally import finalize_voting_if_needed
from impostor.services.view import project_view

logger = logging.getLogger(__name__)

ROOM_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"


def room_key(code: str) -> str:
    return f"room:{code}"


def generate_room_code(length: Optional[int] = None, rng: Optional[random.Random] = None) -> str:
    """随机生成房间号，字母表不含 0/O/1/I 等易混字符"""
    rng = rng or random
    length = length or settings.ROOM_CODE_LENGTH
    return "".join(rng.choice(ROOM_CODE_ALPHABET) for _ in range(length))


class RoomService:
    """房间管理服务类"""

    def __init__(self, store: KeyValueStore,
                 clock: Callable[[], int] = transitions.current_millis,
                 rng: Optional[random.Random] = None):
        self.store = store
        self.clock = clock
        self.rng = rng

    async def create_unique_room_code(self) -> str:
        for _ in range(settings.ROOM_CODE_ATTEMPTS):
            code = generate_room_code(rng=self.rng)
            if not await self.store.exists(room_key(code)):
                return code
        logger.error(f"Could not find a free room code after {settings.ROOM_CODE_ATTEMPTS} attempts")
        audit_logger.log_event(
            AuditEventType.STORE_FAILURE,
            details={"reason": "room_code_exhausted", "attempts": settings.ROOM_CODE_ATTEMPTS},
            success=False
        )
        raise StoreError("Could not create a room. Please try again.")

    async def load_room(self, code: str) -> Room:
        data = await self.store.get(room_key(code))
        if not data:
            raise RoomNotFoundError("Room not found.")

        try:
            record = json.loads(data)
            return Room.model_validate(normalize_room_record(record))
        except (ValueError, TypeError, ValidationError) as e:
            logger.error(f"Corrupted record for room {code}: {e}")
            audit_logger.log_event(
                AuditEventType.STORE_FAILURE, room_code=code,
                details={"reason": "corrupted_record"}, success=False
            )
            raise StoreError(f"Room record is unreadable: {e}") from e

    async def save_room(self, room: Room):
        await self.store.set(
            room_key(room.code),
            json.dumps(room.to_record(), ensure_ascii=False),
            settings.ROOM_TTL_SECONDS
        )

    async def delete_room(self, code: str):
        await self.store.delete(room_key(code))

    async def create_room(self, player_id: str, player_name: Optional[str],
                          player_avatar: Optional[str] = None) -> Tuple[str, RoomView]:
        """
        创建新房间

        Validates the player before spending store round trips on a code.
        """
        transitions.validate_new_player(player_id, player_name)

        code = await self.create_unique_room_code()
        room = transitions.create_room(code, player_id, player_name, player_avatar)
        await self.save_room(room)

        audit_logger.log_event(AuditEventType.ROOM_CREATE, room_code=code, player_id=player_id)
        return code, project_view(room, player_id, self.clock())

    async def get_room_view(self, code: str, player_id: str) -> RoomView:
        """轮询房间状态，顺带结算已到期的投票"""
        code = code.upper()
        room = await self.load_room(code)
        now = self.clock()

        if finalize_voting_if_needed(room, now):
            await self.save_room(room)
            self._log_voting_finish(room)

        return project_view(room, player_id, now)

    async def handle_action(self, code: str, request: RoomActionRequest) -> Optional[RoomView]:
        """
        执行房间操作

        Returns the requester's view, or None when the requester left the room.
        Nothing is written when the action is rejected.
        """
        code = code.upper()
        action = request.action or RoomActionType.JOIN
        player_id = request.player_id

        room = await self.load_room(code)
        now = self.clock()

        # Votes check the deadline themselves so a late vote is dropped instead of rejected
        if action != RoomActionType.VOTE:
            finalize_voting_if_needed(room, now)

        was_voting = room.state == RoomState.VOTING

        try:
            if action == RoomActionType.JOIN:
                transitions.join_room(room, player_id, request.player_name, request.player_avatar)
                audit_logger.log_event(AuditEventType.ROOM_JOIN, room_code=code, player_id=player_id)

            elif action == RoomActionType.START:
                transitions.start_game(
                    room, player_id,
                    num_impostors=request.num_impostors,
                    max_votings=request.max_votings,
                    category=request.category,
                    voting_duration_seconds=request.voting_duration_seconds,
                    rng=self.rng
                )
                audit_logger.log_event(
                    AuditEventType.GAME_START, room_code=code, player_id=player_id,
                    details={"players": len(room.players), "category": room.settings.category}
                )

            elif action == RoomActionType.START_VOTING:
                transitions.start_voting(room, player_id, now)
                audit_logger.log_event(AuditEventType.VOTING_START, room_code=code, player_id=player_id)

            elif action == RoomActionType.VOTE:
                transitions.cast_vote(room, player_id, request.target_player_id, now)
                audit_logger.log_event(AuditEventType.PLAYER_VOTE, room_code=code, player_id=player_id)

            elif action == RoomActionType.REVEAL:
                transitions.reveal(room, player_id)
                audit_logger.log_event(AuditEventType.GAME_REVEAL, room_code=code, player_id=player_id)

            elif action == RoomActionType.NEXT_ROUND:
                transitions.next_round(room, player_id)
                audit_logger.log_event(AuditEventType.ROUND_RESET, room_code=code, player_id=player_id)

            elif action == RoomActionType.KICK:
                transitions.kick_player(room, player_id, request.target_player_id)
                audit_logger.log_event(
                    AuditEventType.PLAYER_KICK, room_code=code, player_id=player_id,
                    details={"target_player_id": request.target_player_id}
                )

            elif action == RoomActionType.LEAVE:
                return await self._leave(room, player_id)

            else:
                raise RoomValidationError("Invalid action.")

        except RoomError as e:
            audit_logger.log_event(
                AuditEventType.ACTION_REJECTED, room_code=code, player_id=player_id,
                details={"action": action.value, "reason": e.message}, success=False
            )
            raise

        await self.save_room(room)
        if was_voting and room.state != RoomState.VOTING:
            self._log_voting_finish(room)

        return project_view(room, player_id, now)

    async def _leave(self, room: Room, player_id: str) -> None:
        if room.find_player(player_id) is None:
            return None

        if transitions.leave_room(room, player_id):
            await self.delete_room(room.code)
            audit_logger.log_event(AuditEventType.ROOM_DELETE, room_code=room.code, player_id=player_id)
            return None

        await self.save_room(room)
        audit_logger.log_event(AuditEventType.ROOM_LEAVE, room_code=room.code, player_id=player_id)
        return None

    def _log_voting_finish(self, room: Room):
        result = room.last_voting_result
        audit_logger.log_event(
            AuditEventType.VOTING_FINISH, room_code=room.code,
            details={
                "eliminated_player_id": result.eliminated_player_id if result else None,
                "is_tie": result.is_tie if result else None,
                "winner": room.winner.value if room.winner else None
            }
        )
