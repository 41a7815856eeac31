"""
Audit logging service
审计日志服务 - 记录房间关键操作，但不泄露秘密词与卧底身份
"""

import logging
from typing import Dict, Any, Optional
from enum import Enum

logger = logging.getLogger("impostor.audit")


class AuditEventType(str, Enum):
    """审计事件类型"""
    ROOM_CREATE = "room_create"
    ROOM_JOIN = "room_join"
    ROOM_LEAVE = "room_leave"
    ROOM_DELETE = "room_delete"
    PLAYER_KICK = "player_kick"
    GAME_START = "game_start"
    VOTING_START = "voting_start"
    PLAYER_VOTE = "player_vote"
    VOTING_FINISH = "voting_finish"
    GAME_REVEAL = "game_reveal"
    ROUND_RESET = "round_reset"
    ACTION_REJECTED = "action_rejected"
    STORE_FAILURE = "store_failure"


class AuditLogger:
    """审计日志记录器"""

    def __init__(self):
        self.sensitive_fields = {"secret", "word", "impostor"}

    def _sanitize_data(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """清理敏感信息"""
        sanitized = {}

        for key, value in data.items():
            if any(sensitive in key.lower() for sensitive in self.sensitive_fields):
                sanitized[key] = "***REDACTED***"
            elif isinstance(value, dict):
                sanitized[key] = self._sanitize_data(value)
            else:
                sanitized[key] = value

        return sanitized

    def log_event(
        self,
        event_type: AuditEventType,
        room_code: Optional[str] = None,
        player_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        success: bool = True
    ) -> str:
        """
        记录审计事件

        Args:
            event_type: 事件类型
            room_code: 房间号
            player_id: 玩家ID
            details: 事件详情
            success: 操作是否成功

        Returns:
            str: 写入日志的消息
        """
        sanitized_details = self._sanitize_data(details) if details else {}

        log_message = f"Audit: {event_type.value} - Room: {room_code} - Player: {player_id} - Success: {success}"
        if sanitized_details:
            log_message += f" - Details: {sanitized_details}"

        if success:
            logger.info(log_message)
        else:
            logger.warning(log_message)
        return log_message


# Global audit logger instance
audit_logger = AuditLogger()
