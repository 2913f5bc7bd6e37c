"""
兼容入口：从 aibrain2api.main 导入应用
保留此文件以便使用 uvicorn main:app 启动
"""

from aibrain2api.main import app, settings

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.host, port=settings.port)
