"""
数据模型
"""
