"""
AIBrain2API：将 OpenAI 兼容的聊天请求转换为 AIBrain 私有大模型 API 请求
"""

__version__ = "1.0.0"
