"""
Signage Board 主入口：启动布局编辑引擎的 FastAPI 后端服务。
"""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from signage import api
from signage.config_loader import AppConfig, load_config
from signage.layout_store import LayoutStore
from signage.mutations import uuid_ids
from signage.registry import ComponentRegistry
from signage.revision_store import RevisionStore

# 日志配置
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan 事件处理：启动时和关闭时的逻辑。"""
    layouts = app.state.layout_store.load_layouts()
    logger.info(f"已载入 {len(layouts)} 个布局")

    yield  # 应用运行中

    # 关闭时：关闭数据库连接
    logger.info("正在关闭...")
    app.state.revision_store.close()


def create_app(config: AppConfig | None = None) -> FastAPI:
    """创建并配置 FastAPI 应用。"""
    app = FastAPI(
        title="Signage Board API",
        description="Grid placement engine for digital-signage screen layouts",
        version="0.1.0",
        lifespan=lifespan,
    )

    # CORS 中间件
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:3000", "http://localhost:5173"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ── 初始化核心组件 ────────────────────────────────────────
    if config is None:
        logger.info("正在加载配置...")
        config = load_config()
    logger.info(f"网格 {config.grid.cols}x{config.grid.rows}，{len(config.components)} 个自定义组件")

    data_dir = Path(config.data_dir)

    # 组件注册表
    registry = ComponentRegistry(config.components)

    # 布局与模板存储 (JSON-based storage)
    layout_store = LayoutStore(data_dir)

    # 修订记录
    revision_store = RevisionStore(data_dir / "revisions.json")

    # 注入依赖到 API 模块
    api.init_api(
        config=config,
        registry=registry,
        layout_store=layout_store,
        revision_store=revision_store,
        id_factory=uuid_ids(),
    )

    # 注册 API 路由
    app.include_router(api.router)

    # 将组件存到 app.state，供 lifespan 访问
    app.state.config = config
    app.state.layout_store = layout_store
    app.state.revision_store = revision_store

    return app


def main():
    """主入口。"""
    port = int(sys.argv[1]) if len(sys.argv) > 1 else 8400

    logger.info(f"🚀 启动 Signage Board 后端 (port={port})...")

    app = create_app()

    uvicorn.run(
        app,
        host="127.0.0.1",
        port=port,
        log_level="info",
    )


if __name__ == "__main__":
    main()
