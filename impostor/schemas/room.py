"""
Room Pydantic schemas
房间聚合数据模型 - 与存储中的JSON记录一一对应 (camelCase)
"""

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel
from typing import Optional, List, Dict, Any
from enum import Enum

from impostor.core.config import settings


SKIP_VOTE = "skip"


class RoomState(str, Enum):
    """房间状态枚举"""
    LOBBY = "lobby"
    IN_PROGRESS = "in_progress"
    VOTING = "voting"
    REVEAL = "reveal"


class Winner(str, Enum):
    """获胜方枚举"""
    CREWMATES = "crewmates"
    IMPOSTORS = "impostors"


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys"""

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class Player(CamelModel):
    """房间内玩家"""
    id: str
    name: str
    avatar: str = ""


class RoomSettings(CamelModel):
    """房间设置，仅在大厅阶段可修改"""
    num_impostors: int = Field(default_factory=lambda: settings.DEFAULT_NUM_IMPOSTORS)
    category: str = Field(default_factory=lambda: settings.DEFAULT_CATEGORY)
    max_votings: int = Field(default_factory=lambda: settings.DEFAULT_MAX_VOTINGS)
    voting_duration_seconds: int = Field(
        default_factory=lambda: settings.DEFAULT_VOTING_DURATION_SECONDS
    )


class VotingResult(CamelModel):
    """最近一次投票的统计结果"""
    eliminated_player_id: Optional[str] = None
    eliminated_was_impostor: bool = False
    is_tie: bool = False
    votes_per_player: Dict[str, int] = Field(default_factory=dict)
    skip_votes: int = 0


class Room(CamelModel):
    """One game instance, persisted as a single JSON document"""
    code: str
    host_id: str
    players: List[Player] = Field(default_factory=list)
    state: RoomState = RoomState.LOBBY
    settings: RoomSettings = Field(default_factory=RoomSettings)
    secret_word: Optional[str] = None
    impostor_ids: List[str] = Field(default_factory=list)
    eliminated_player_ids: List[str] = Field(default_factory=list)
    votes: Dict[str, str] = Field(default_factory=dict)
    voting_ends_at: Optional[int] = None  # epoch milliseconds
    total_votings: int = Field(default_factory=lambda: settings.DEFAULT_MAX_VOTINGS)
    remaining_votings: int = Field(default_factory=lambda: settings.DEFAULT_MAX_VOTINGS)
    last_voting_result: Optional[VotingResult] = None
    winner: Optional[Winner] = None

    @property
    def player_ids(self) -> List[str]:
        return [p.id for p in self.players]

    @property
    def active_player_ids(self) -> List[str]:
        """未被淘汰的玩家ID（按加入顺序）"""
        return [p.id for p in self.players if p.id not in self.eliminated_player_ids]

    @property
    def alive_impostor_ids(self) -> List[str]:
        return [i for i in self.impostor_ids if i not in self.eliminated_player_ids]

    def find_player(self, player_id: str) -> Optional[Player]:
        return next((p for p in self.players if p.id == player_id), None)

    def is_host(self, player_id: str) -> bool:
        return self.host_id == player_id

    def to_record(self) -> Dict[str, Any]:
        """Serialize for the store"""
        return self.model_dump(by_alias=True, mode="json")


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def normalize_room_record(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Fill in fields missing from older or partial records before validation.

    Works on the camelCase layout stored under ``room:{CODE}``.
    """
    data = dict(data)

    room_settings = data.get("settings")
    if not isinstance(room_settings, dict):
        room_settings = {}
    else:
        room_settings = dict(room_settings)
        if not _is_number(room_settings.get("maxVotings")):
            room_settings["maxVotings"] = settings.DEFAULT_MAX_VOTINGS
        if not _is_number(room_settings.get("votingDurationSeconds")):
            room_settings["votingDurationSeconds"] = settings.DEFAULT_VOTING_DURATION_SECONDS
    data["settings"] = room_settings

    if not isinstance(data.get("eliminatedPlayerIds"), list):
        data["eliminatedPlayerIds"] = []

    if not isinstance(data.get("votes"), dict):
        data["votes"] = {}

    if not _is_number(data.get("votingEndsAt")):
        data["votingEndsAt"] = None

    if not _is_number(data.get("totalVotings")):
        data["totalVotings"] = room_settings.get("maxVotings", settings.DEFAULT_MAX_VOTINGS)

    if not _is_number(data.get("remainingVotings")):
        data["remainingVotings"] = data["totalVotings"]

    if data.get("winner") not in (Winner.CREWMATES.value, Winner.IMPOSTORS.value):
        data["winner"] = None

    return data
