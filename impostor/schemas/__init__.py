# Pydantic schemas
from .room import (
    SKIP_VOTE, RoomState, Winner, CamelModel, Player, RoomSettings,
    VotingResult, Room, normalize_room_record
)
from .view import (
    PlayerView, SelfView, RevealView, VoteCountView, VotingResultView,
    VotingView, RoomView
)
from .action import RoomActionType, RoomCreateRequest, RoomActionRequest

__all__ = [
    # Room schemas
    "SKIP_VOTE", "RoomState", "Winner", "CamelModel", "Player", "RoomSettings",
    "VotingResult", "Room", "normalize_room_record",

    # View schemas
    "PlayerView", "SelfView", "RevealView", "VoteCountView", "VotingResultView",
    "VotingView", "RoomView",

    # Request schemas
    "RoomActionType", "RoomCreateRequest", "RoomActionRequest"
]
