"""
View projector
按请求玩家裁剪房间数据：卧底看不到秘密词，投票期间看不到他人选票
"""

from typing import Optional

from impostor.core.exceptions import RoomForbiddenError
from impostor.schemas.room import Room, RoomState, RoomSettings, Player
from impostor.schemas.view import (
    PlayerView, SelfView, RevealView, VoteCountView, VotingResultView,
    VotingView, RoomView
)
from impostor.services.room import current_millis


def _player_view(player: Player) -> PlayerView:
    return PlayerView(id=player.id, name=player.name, avatar=player.avatar)


def build_voting_view(room: Room, player_id: str, now: int) -> VotingView:
    active_ids = room.active_player_ids
    votes_submitted = len([voter_id for voter_id in room.votes if voter_id in active_ids])
    is_active = player_id in active_ids
    has_voted = bool(room.votes.get(player_id))
    can_vote = (
        room.state == RoomState.VOTING
        and is_active
        and not has_voted
        and room.voting_ends_at is not None
        and room.voting_ends_at > now
    )

    if room.state == RoomState.VOTING:
        state = "in_progress"
    elif room.last_voting_result is not None:
        state = "results"
    else:
        state = "idle"

    view = VotingView(
        state=state,
        ends_at=room.voting_ends_at if room.state == RoomState.VOTING else None,
        total_voters=len(active_ids),
        votes_submitted=votes_submitted,
        has_voted=has_voted,
        can_vote=can_vote,
        remaining_votings=room.remaining_votings,
        total_votings=room.total_votings,
        game_over=room.winner is not None,
        winner=room.winner
    )

    if state == "in_progress":
        view.options = [
            _player_view(p) for p in room.players
            if p.id in active_ids and p.id != player_id
        ]

    if state == "results":
        last = room.last_voting_result
        counts = []
        for target_id, count in last.votes_per_player.items():
            # Votes for players who have since left are kept in the record but not shown
            target = room.find_player(target_id)
            if target is not None:
                counts.append(VoteCountView(player=_player_view(target), votes=count))
        counts.sort(key=lambda entry: entry.votes, reverse=True)

        eliminated = None
        eliminated_was_impostor = False
        if last.eliminated_player_id:
            eliminated_player = room.find_player(last.eliminated_player_id)
            if eliminated_player is not None:
                eliminated = _player_view(eliminated_player)
                eliminated_was_impostor = eliminated_player.id in room.impostor_ids

        view.result = VotingResultView(
            eliminated_player=eliminated,
            eliminated_was_impostor=eliminated_was_impostor,
            is_tie=last.is_tie,
            skip_votes=last.skip_votes,
            votes=counts
        )

    return view


def project_view(room: Room, player_id: str, now: Optional[int] = None) -> RoomView:
    """
    Build the snapshot the given player is allowed to see.

    Raises RoomForbiddenError when the player is not (or no longer) in the room.
    """
    player = room.find_player(player_id)
    if player is None:
        raise RoomForbiddenError("Player is not part of this room.")

    now = current_millis() if now is None else now
    is_impostor = player_id in room.impostor_ids

    view = RoomView(
        code=room.code,
        state=room.state,
        settings=RoomSettings(
            num_impostors=room.settings.num_impostors,
            category=room.settings.category,
            max_votings=room.settings.max_votings,
            voting_duration_seconds=room.settings.voting_duration_seconds
        ),
        players=[_player_view(p) for p in room.players],
        you=SelfView(
            id=player.id,
            name=player.name,
            avatar=player.avatar,
            is_impostor=is_impostor,
            secret_word=None if is_impostor else room.secret_word
        )
    )

    if room.state == RoomState.REVEAL and room.secret_word:
        view.reveal = RevealView(
            word=room.secret_word,
            impostors=[_player_view(p) for p in room.players if p.id in room.impostor_ids]
        )

    view.voting = build_voting_view(room, player_id, now)
    return view
