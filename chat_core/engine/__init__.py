"""会话引擎：打字延迟模拟与会话状态机。"""
