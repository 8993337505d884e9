"""
Mail Client Tools - API 入口

运行：
    python main.py

或使用 uvicorn：
    uvicorn main:app --host 0.0.0.0 --port 8000 --reload

API 文档：
    http://localhost:8000/docs
"""

import uvicorn

from infrastructure.config.logging_config import configure_logging
from infrastructure.config.settings import get_settings
from interfaces.api import create_app


settings = get_settings()
configure_logging(settings)

# 导出 FastAPI app (用于 uvicorn)
app = create_app()


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
