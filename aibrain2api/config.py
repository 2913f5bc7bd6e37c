"""
应用配置
使用 pydantic-settings 从环境变量、.env 文件或 JSON 配置文件中读取配置
"""
import json
import os
from typing import Dict, Optional, Tuple, Type
from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    JsonConfigSettingsSource,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

# JSON 配置文件路径，可通过环境变量覆盖
CONFIG_FILE_ENV = 'AIBRAIN2API_CONFIG_FILE'
DEFAULT_CONFIG_FILE = 'config.json'


class Settings(BaseSettings):
    """应用配置类（加载后不可变）"""

    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=False,
        extra='ignore',  # 忽略未定义的字段
        frozen=True,
    )

    # 目标 API（AIBrain 大模型应用运行接口）地址
    target_base_url: str = Field(
        default='https://aibrain-large-model.hellobike.cn/AIBrainLmp/api/v1/runLargeModelApplication/run',
        description='目标 API 地址'
    )

    # 凭证对：转发时原样写入 agentId / secretKey
    default_agent_id: str = Field(default='', description='默认 AgentID')
    default_secret_key: str = Field(default='', description='默认 SecretKey')

    host: str = Field(default='0.0.0.0', description='服务监听地址')
    port: int = Field(default=8080, description='服务监听端口')

    # 模型名称映射：OpenAI 模型名 -> 私有 API 服务名
    # 环境变量格式：MODEL_MAP={"gpt-4o": "deepseek-v3"}
    model_map: Dict[str, str] = Field(
        default_factory=dict,
        description='模型名称映射'
    )

    # 日志文件路径，为空时仅输出到控制台
    log_file: Optional[str] = Field(default=None, description='日志文件路径')
    log_level: str = Field(default='INFO', description='日志级别')

    # 响应中固定返回的模型标识与系统指纹
    response_model_label: str = Field(default='deepseek-chat')
    system_fingerprint: str = Field(default='fp_8802369eaa_prod0425fp8')

    # 后端读取超时（秒）
    request_timeout: float = Field(default=180.0, description='后端请求超时')
    http2: bool = Field(default=True, description='是否启用 HTTP/2')

    @field_validator('model_map', mode='before')
    @classmethod
    def parse_model_map(cls, v):
        """解析模型映射，支持 JSON 字符串和字典"""
        if v is None or v == '':
            return {}
        if isinstance(v, str):
            return json.loads(v)
        return v

    @field_validator('log_level', mode='before')
    @classmethod
    def normalize_log_level(cls, v):
        return str(v).strip().upper() if v else 'INFO'

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        # 优先级：初始化参数 > 环境变量 > .env > JSON 配置文件
        json_file = os.environ.get(CONFIG_FILE_ENV, DEFAULT_CONFIG_FILE)
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            JsonConfigSettingsSource(settings_cls, json_file=json_file),
            file_secret_settings,
        )

    def resolve_service_name(self, model: str) -> str:
        """将请求中的模型名解析为私有 API 服务名，未配置映射时原样返回"""
        return self.model_map.get(model, model)


# 创建全局配置实例（进程启动时加载一次）
settings = Settings()

__all__ = [
    'Settings',
    'settings',
    'CONFIG_FILE_ENV',
]
