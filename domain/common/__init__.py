"""领域公共模块

包含值对象基类、领域异常和事件订阅列表。
"""
