"""
Development server runner
开发服务器启动脚本
"""

import uvicorn
from impostor.core.config import settings

if __name__ == "__main__":
    # reload 模式和 workers 不能同时使用
    if settings.DEBUG:
        uvicorn.run(
            "impostor.main:app",
            host=settings.HOST,
            port=settings.PORT,
            reload=True,
            access_log=True,
            log_level=settings.LOG_LEVEL.lower()
        )
    else:
        # The in-memory store is per process, use Redis with more than one worker
        uvicorn.run(
            "impostor.main:app",
            host=settings.HOST,
            port=settings.PORT,
            workers=settings.WORKERS,
            access_log=True,
            log_level=settings.LOG_LEVEL.lower()
        )
