"""
Vote tally service
投票统计与结算 - 纯函数，不访问存储
"""

import logging
from typing import Dict, Iterable, List, Mapping

from impostor.schemas.room import Room, RoomState, VotingResult, Winner, SKIP_VOTE

logger = logging.getLogger(__name__)


def tally_votes(votes: Mapping[str, str], active_player_ids: List[str],
                impostor_ids: Iterable[str]) -> VotingResult:
    """
    Count the votes of the active players.

    Players who did not vote count as skips. A single top target is
    eliminated; no target votes, several targets sharing the top count,
    or a top target who is no longer active is a tie.
    """
    votes_per_player: Dict[str, int] = {}
    skip_votes = 0

    for voter_id in active_player_ids:
        target = votes.get(voter_id)
        if not target or target == SKIP_VOTE:
            skip_votes += 1
            continue
        votes_per_player[target] = votes_per_player.get(target, 0) + 1

    max_votes = max(votes_per_player.values(), default=0)
    eliminated_player_id = None
    is_tie = False

    if max_votes == 0:
        is_tie = True
    else:
        top = [player_id for player_id, count in votes_per_player.items() if count == max_votes]
        # A top target who already left the room cannot be eliminated
        if len(top) > 1 or top[0] not in active_player_ids:
            is_tie = True
        else:
            eliminated_player_id = top[0]

    return VotingResult(
        eliminated_player_id=eliminated_player_id,
        eliminated_was_impostor=eliminated_player_id is not None and eliminated_player_id in set(impostor_ids),
        is_tie=is_tie,
        votes_per_player=votes_per_player,
        skip_votes=skip_votes
    )


def finalize_voting(room: Room) -> VotingResult:
    """结算当前投票阶段，决定淘汰、胜负与下一状态"""
    result = tally_votes(room.votes, room.active_player_ids, room.impostor_ids)

    if result.eliminated_player_id and result.eliminated_player_id not in room.eliminated_player_ids:
        room.eliminated_player_ids.append(result.eliminated_player_id)

    room.last_voting_result = result

    if room.remaining_votings > 0:
        room.remaining_votings -= 1

    if not room.alive_impostor_ids:
        room.winner = Winner.CREWMATES
    elif room.remaining_votings <= 0:
        room.winner = Winner.IMPOSTORS

    room.state = RoomState.REVEAL if room.winner else RoomState.IN_PROGRESS
    room.voting_ends_at = None

    logger.info(
        f"Voting finalized in room {room.code}: eliminated={result.eliminated_player_id} "
        f"tie={result.is_tie} skips={result.skip_votes} "
        f"remaining={room.remaining_votings} winner={room.winner.value if room.winner else None}"
    )
    return result


def voting_should_finalize(room: Room, now: int) -> bool:
    """所有存活玩家已投票，或投票截止时间已过"""
    if room.state != RoomState.VOTING:
        return False

    active_ids = room.active_player_ids
    votes_submitted = len([voter_id for voter_id in room.votes if voter_id in active_ids])
    all_voted = len(active_ids) > 0 and votes_submitted >= len(active_ids)
    expired = room.voting_ends_at is not None and room.voting_ends_at <= now

    return all_voted or expired


def finalize_voting_if_needed(room: Room, now: int) -> bool:
    """Lazily finalize; returns True when the room changed"""
    if not voting_should_finalize(room, now):
        return False
    finalize_voting(room)
    return True
