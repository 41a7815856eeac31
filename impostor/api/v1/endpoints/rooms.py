"""
Room API endpoints
房间API端点 - 创建、轮询、操作
"""

import logging
from typing import Optional
from fastapi import APIRouter, Depends, Query, Response, status

from impostor.core.exceptions import RoomError, RoomValidationError, StoreError
from impostor.core.store import KeyValueStore, get_store
from impostor.schemas.action import RoomCreateRequest, RoomActionRequest
from impostor.services.room_service import RoomService

logger = logging.getLogger(__name__)

router = APIRouter()


def get_room_service(store: KeyValueStore = Depends(get_store)) -> RoomService:
    """获取房间服务依赖"""
    return RoomService(store)


@router.post("")
async def create_room(
    room_data: RoomCreateRequest,
    room_service: RoomService = Depends(get_room_service)
):
    """
    创建新房间

    - **playerId**: 客户端生成的玩家ID
    - **playerName**: 玩家昵称
    - **playerAvatar**: 玩家头像 (可选)
    """
    try:
        code, view = await room_service.create_room(
            room_data.player_id, room_data.player_name, room_data.player_avatar
        )
    except RoomError:
        raise
    except Exception as e:
        logger.error(f"Failed to create room: {e}", exc_info=True)
        raise StoreError(f"Failed to create room: {str(e)}")

    return {"roomCode": code, "view": view.to_response()}


@router.get("/{code}")
async def get_room(
    code: str,
    player_id: Optional[str] = Query(None, alias="playerId"),
    room_service: RoomService = Depends(get_room_service)
):
    """
    获取房间视图 (客户端轮询)

    Finalizes an expired voting phase as a side effect.
    """
    if not player_id:
        raise RoomValidationError("Player id is required.")

    try:
        view = await room_service.get_room_view(code, player_id)
    except RoomError:
        raise
    except Exception as e:
        logger.error(f"Failed to fetch room {code}: {e}", exc_info=True)
        raise StoreError(f"Failed to fetch room: {str(e)}")

    return view.to_response()


@router.post("/{code}")
async def room_action(
    code: str,
    action_data: RoomActionRequest,
    room_service: RoomService = Depends(get_room_service)
):
    """
    执行房间操作

    - **action**: join, start, startVoting, vote, reveal, nextRound, kick, leave
    - **playerId**: 操作者ID
    """
    try:
        view = await room_service.handle_action(code, action_data)
    except RoomError:
        raise
    except Exception as e:
        logger.error(f"Failed to process action on room {code}: {e}", exc_info=True)
        raise StoreError(f"Failed to process room action: {str(e)}")

    if view is None:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return view.to_response()
