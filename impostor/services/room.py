"""
Room state machine
房间状态机 - lobby → in_progress → voting → reveal → lobby

Every transition validates its guards first and raises a RoomError before
touching the room, so a failed action never leaves a half-mutated aggregate.
"""

import logging
import random
import time
from typing import Optional

from impostor.core.config import settings
from impostor.core.exceptions import RoomValidationError, RoomForbiddenError, RoomNotFoundError
from impostor.schemas.room import Room, RoomState, RoomSettings, Player, SKIP_VOTE
from impostor.services.tally import finalize_voting, finalize_voting_if_needed
from impostor.services.words import pick_random_word, pick_random_impostors, is_known_category

logger = logging.getLogger(__name__)


def current_millis() -> int:
    return int(time.time() * 1000)


def _clean_name(player_name: Optional[str]) -> str:
    name = (player_name or "").strip()
    if not name:
        raise RoomValidationError("Player name is required.")
    return name


def _clean_avatar(player_avatar: Optional[str]) -> str:
    return (player_avatar or "").strip() or settings.DEFAULT_AVATAR


def _require_host(room: Room, actor_id: str, message: str):
    if not room.is_host(actor_id):
        raise RoomForbiddenError(message)


def validate_new_player(player_id: Optional[str], player_name: Optional[str]) -> str:
    if not player_id:
        raise RoomValidationError("Player id is required.")
    return _clean_name(player_name)


def create_room(code: str, player_id: str, player_name: Optional[str],
                player_avatar: Optional[str] = None) -> Room:
    """创建房间，创建者成为房主"""
    name = validate_new_player(player_id, player_name)

    room_settings = RoomSettings()
    return Room(
        code=code,
        host_id=player_id,
        players=[Player(id=player_id, name=name, avatar=_clean_avatar(player_avatar))],
        state=RoomState.LOBBY,
        settings=room_settings,
        total_votings=room_settings.max_votings,
        remaining_votings=room_settings.max_votings
    )


def join_room(room: Room, player_id: str, player_name: Optional[str],
              player_avatar: Optional[str] = None) -> Room:
    """加入房间；同一ID重复加入时只更新昵称和头像"""
    name = _clean_name(player_name)
    avatar = _clean_avatar(player_avatar)

    existing = room.find_player(player_id)
    if existing:
        existing.name = name
        existing.avatar = avatar
    else:
        room.players.append(Player(id=player_id, name=name, avatar=avatar))
    return room


def kick_player(room: Room, actor_id: str, target_player_id: Optional[str]) -> Room:
    _require_host(room, actor_id, "Only the host can remove players.")

    if room.state != RoomState.LOBBY:
        raise RoomValidationError("Players can only be removed before the game starts.")
    if not target_player_id:
        raise RoomValidationError("Invalid target player.")
    if target_player_id == room.host_id:
        raise RoomValidationError("The host cannot be removed.")

    target = room.find_player(target_player_id)
    if target is None:
        raise RoomNotFoundError("Player not found in this room.")

    room.players.remove(target)
    return room


def leave_room(room: Room, player_id: str) -> bool:
    """
    Remove a player from the room.

    Returns True when the host left, meaning the whole room must be deleted.
    A player id that is not in the room is a no-op.
    """
    if room.is_host(player_id):
        return True

    player = room.find_player(player_id)
    if player:
        room.players.remove(player)
    return False


def start_game(room: Room, actor_id: str,
               num_impostors: Optional[int] = None,
               max_votings: Optional[int] = None,
               category: Optional[str] = None,
               voting_duration_seconds: Optional[int] = None,
               rng: Optional[random.Random] = None) -> Room:
    """开始一局：抽词、分配卧底、重置投票计数"""
    _require_host(room, actor_id, "Only the host can start the game.")

    if room.state != RoomState.LOBBY:
        raise RoomValidationError("The game has already started.")

    total_players = len(room.players)
    impostors_requested = num_impostors if num_impostors is not None else room.settings.num_impostors
    max_votings_requested = max_votings if max_votings is not None else room.settings.max_votings
    category_requested = category if category is not None else room.settings.category
    duration_requested = (
        voting_duration_seconds if voting_duration_seconds is not None
        else room.settings.voting_duration_seconds
    )

    if total_players < settings.MIN_PLAYERS:
        raise RoomValidationError(f"At least {settings.MIN_PLAYERS} players are required.")
    if impostors_requested < 1 or impostors_requested >= total_players:
        raise RoomValidationError("Number of impostors must be between 1 and total players - 1.")
    if max_votings_requested < 1:
        raise RoomValidationError("Number of votings must be at least 1.")
    if not is_known_category(category_requested):
        raise RoomValidationError(f"Unknown category: {category_requested}.")
    if duration_requested < 1:
        raise RoomValidationError("Voting duration must be at least 1 second.")

    room.settings.num_impostors = impostors_requested
    room.settings.max_votings = max_votings_requested
    room.settings.category = category_requested
    room.settings.voting_duration_seconds = duration_requested

    room.secret_word = pick_random_word(category_requested, rng)
    room.impostor_ids = pick_random_impostors(room.player_ids, impostors_requested, rng)
    room.state = RoomState.IN_PROGRESS
    room.eliminated_player_ids = []
    room.votes = {}
    room.voting_ends_at = None
    room.total_votings = max_votings_requested
    room.remaining_votings = max_votings_requested
    room.last_voting_result = None
    room.winner = None

    logger.info(
        f"Game started in room {room.code}: players={total_players} "
        f"impostors={impostors_requested} votings={max_votings_requested}"
    )
    return room


def start_voting(room: Room, actor_id: str, now: Optional[int] = None) -> Room:
    _require_host(room, actor_id, "Only the host can start a voting.")

    if room.state != RoomState.IN_PROGRESS:
        raise RoomValidationError("Voting can only start during a round.")
    if room.winner:
        raise RoomValidationError("The game is already over.")
    if room.remaining_votings <= 0:
        raise RoomValidationError("No votings left.")
    if len(room.active_player_ids) < settings.MIN_PLAYERS:
        raise RoomValidationError(
            f"At least {settings.MIN_PLAYERS} active players are required to vote."
        )

    duration = room.settings.voting_duration_seconds
    if duration <= 0:
        duration = settings.DEFAULT_VOTING_DURATION_SECONDS

    now = current_millis() if now is None else now
    room.state = RoomState.VOTING
    room.votes = {}
    room.last_voting_result = None
    room.voting_ends_at = now + duration * 1000
    return room


def cast_vote(room: Room, actor_id: str, target_player_id: Optional[str],
              now: Optional[int] = None) -> Room:
    """
    Record one vote, finalizing when everybody has voted.

    A vote arriving after the deadline is ignored: the phase is finalized
    instead and no error is raised.
    """
    now = current_millis() if now is None else now

    if room.state != RoomState.VOTING:
        raise RoomValidationError("Voting is not active right now.")
    if room.winner:
        raise RoomValidationError("The game is already over.")

    active_ids = room.active_player_ids
    if actor_id not in active_ids:
        raise RoomForbiddenError("Only active players can vote.")
    if room.voting_ends_at is not None and now >= room.voting_ends_at:
        finalize_voting(room)
        return room

    if room.votes.get(actor_id):
        raise RoomValidationError("You already voted in this round.")

    if not target_player_id:
        raise RoomValidationError("Invalid vote.")

    if target_player_id != SKIP_VOTE:
        if target_player_id == actor_id:
            raise RoomValidationError("You cannot vote for yourself.")
        if target_player_id not in active_ids:
            raise RoomValidationError("You can only vote for active players in the room.")

    room.votes[actor_id] = target_player_id
    finalize_voting_if_needed(room, now)
    return room


def reveal(room: Room, actor_id: str) -> Room:
    _require_host(room, actor_id, "Only the host can reveal the result.")

    if room.state != RoomState.IN_PROGRESS:
        raise RoomValidationError("The game is not in progress.")

    room.state = RoomState.REVEAL
    room.voting_ends_at = None
    return room


def next_round(room: Room, actor_id: str) -> Room:
    """回到大厅，清空本局数据"""
    _require_host(room, actor_id, "Only the host can start a new round.")

    if room.state == RoomState.LOBBY:
        raise RoomValidationError("The game has not started yet.")

    room.state = RoomState.LOBBY
    room.secret_word = None
    room.impostor_ids = []
    room.eliminated_player_ids = []
    room.votes = {}
    room.voting_ends_at = None
    room.last_voting_result = None
    room.winner = None
    room.total_votings = room.settings.max_votings
    room.remaining_votings = room.settings.max_votings
    return room
