"""
FastAPI 应用主入口
"""
import json
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from aibrain2api import __version__
from aibrain2api.api.v1 import chat as chat_api
from aibrain2api.api.v1 import router as v1_router
from aibrain2api.config import settings
from aibrain2api.exceptions import BackendNonSuccessStatus, GatewayError
from aibrain2api.utils.http_client import close_async_client
from aibrain2api.utils.logger import configure_root_logger, get_logger

# 配置根日志记录器（彩色输出 + 可选日志文件）
configure_root_logger(level=settings.log_level, use_color=True, log_file=settings.log_file)

logger = get_logger(__name__)
# 定义一些颜色代码
GREEN = "\033[32m"
RESET = "\033[0m"

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}


def _startup_banner() -> str:
    # 凭证不打印到日志
    visible = {
        "target_base_url": settings.target_base_url,
        "default_agent_id": settings.default_agent_id,
        "model_map": settings.model_map,
        "log_file": settings.log_file,
    }
    return (
        f"{GREEN}AIBrain2API - OpenAI 兼容的私有大模型 API 网关\n"
        f"版本     : {__version__}\n"
        f"监听地址 : {settings.host}:{settings.port}\n"
        f"当前配置信息\n"
        f"{json.dumps(visible, ensure_ascii=False, indent=2)}{RESET}"
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    应用生命周期管理

    关闭时释放全局异步HTTP客户端
    """
    print(f"{GREEN}{'=' * 50}{RESET}")
    print(_startup_banner())
    print(f"{GREEN}{'=' * 50}{RESET}")

    yield

    logger.info("🛑 正在关闭应用...")
    await close_async_client()
    logger.info("✅ 异步HTTP客户端已关闭")


class CORSHeadersMiddleware(BaseHTTPMiddleware):
    """所有响应都附带 CORS 头，OPTIONS 预检请求直接返回 200"""

    async def dispatch(self, request: Request, call_next) -> Response:
        if request.method == "OPTIONS":
            return Response(status_code=200, headers=CORS_HEADERS)

        response = await call_next(request)
        response.headers.update(CORS_HEADERS)
        return response


app = FastAPI(title="AIBrain2API", version=__version__, lifespan=lifespan)
app.add_middleware(CORSHeadersMiddleware)


@app.exception_handler(GatewayError)
async def gateway_error_handler(request: Request, exc: GatewayError):
    """网关错误统一以纯文本返回"""
    if isinstance(exc, BackendNonSuccessStatus):
        # 目标服务的状态码与响应体原样透传
        return Response(content=exc.body, status_code=exc.status_code, media_type="text/plain; charset=utf-8")
    logger.warning(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
    return PlainTextResponse(exc.message, status_code=exc.status_code)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    """方法不允许、路径不存在等错误同样以纯文本返回"""
    return PlainTextResponse(str(exc.detail), status_code=exc.status_code, headers=exc.headers)


# 注册 API 路由：/chat/completions 与 OpenAI 风格的 /v1 前缀
app.include_router(chat_api.router)
app.include_router(v1_router)


@app.get("/")
async def root():
    """根路径，返回 API 基本信息"""
    return {"message": "AIBrain2API is running", "version": __version__}


@app.get("/health")
async def health():
    """健康检查端点"""
    return {"status": "healthy"}


if __name__ == "__main__":
    uvicorn.run(app, host=settings.host, port=settings.port, log_level="info")
