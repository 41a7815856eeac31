"""
Room request schemas
房间请求模型
"""

from pydantic import Field
from typing import Optional
from enum import Enum

from impostor.schemas.room import CamelModel


class RoomActionType(str, Enum):
    """房间操作类型"""
    JOIN = "join"
    START = "start"
    START_VOTING = "startVoting"
    VOTE = "vote"
    REVEAL = "reveal"
    NEXT_ROUND = "nextRound"
    KICK = "kick"
    LEAVE = "leave"


class RoomCreateRequest(CamelModel):
    """创建房间请求"""
    player_id: str = Field(..., min_length=1, description="客户端生成的玩家ID")
    player_name: Optional[str] = Field(None, description="玩家昵称")
    player_avatar: Optional[str] = Field(None, description="玩家头像 (emoji)")


class RoomActionRequest(CamelModel):
    """房间操作请求，未指定 action 时视为 join"""
    action: Optional[RoomActionType] = None
    player_id: str = Field(..., min_length=1)
    player_name: Optional[str] = None
    player_avatar: Optional[str] = None
    num_impostors: Optional[int] = None
    max_votings: Optional[int] = None
    category: Optional[str] = None
    voting_duration_seconds: Optional[int] = None
    target_player_id: Optional[str] = None
