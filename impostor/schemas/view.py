"""
Room view schemas
按玩家视角裁剪后的房间快照
"""

from pydantic import Field
from typing import Optional, List

from impostor.schemas.room import CamelModel, RoomState, RoomSettings, Winner


class PlayerView(CamelModel):
    id: str
    name: str
    avatar: str


class SelfView(PlayerView):
    """请求者自身的信息"""
    is_impostor: bool
    secret_word: Optional[str] = None


class RevealView(CamelModel):
    word: str
    impostors: List[PlayerView]


class VoteCountView(CamelModel):
    player: PlayerView
    votes: int


class VotingResultView(CamelModel):
    eliminated_player: Optional[PlayerView] = None
    eliminated_was_impostor: bool = False
    is_tie: bool = False
    skip_votes: int = 0
    votes: List[VoteCountView] = Field(default_factory=list)


class VotingView(CamelModel):
    """
    投票面板

    ``options`` only exists while voting and ``result`` only once results exist,
    so views are dumped with ``exclude_unset`` and both are left unset otherwise.
    """
    state: str  # idle | in_progress | results
    ends_at: Optional[int] = None
    total_voters: int
    votes_submitted: int
    has_voted: bool
    can_vote: bool
    remaining_votings: int
    total_votings: int
    options: Optional[List[PlayerView]] = None
    result: Optional[VotingResultView] = None
    game_over: bool
    winner: Optional[Winner] = None


class RoomView(CamelModel):
    code: str
    state: RoomState
    settings: RoomSettings
    players: List[PlayerView]
    you: SelfView
    reveal: Optional[RevealView] = None
    voting: Optional[VotingView] = None

    def to_response(self) -> dict:
        return self.model_dump(by_alias=True, exclude_unset=True, mode="json")
