"""
模型相关 API 路由
"""
from fastapi import APIRouter, Depends

from aibrain2api.api.dependencies import get_settings
from aibrain2api.config import Settings
from aibrain2api.models.schemas import ModelInfo, ModelsResponse

router = APIRouter(tags=["models"])

# 模型列表中固定返回的创建时间
MODEL_CREATED_AT = 1677610602


@router.get("/models", response_model=ModelsResponse)
async def get_models(app_settings: Settings = Depends(get_settings)):
    """
    Get available models endpoint compatible with OpenAI API format.
    返回 model_map 中配置的模型名。
    """
    models = [
        ModelInfo(
            id=model_name,
            object="model",
            created=MODEL_CREATED_AT,
            owned_by=service_name
        )
        for model_name, service_name in app_settings.model_map.items()
    ]
    return ModelsResponse(data=models)
