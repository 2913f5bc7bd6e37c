"""
业务服务
"""
