"""虚拟宠物：属性衰减、冷却、连续打卡与成长阶段的模拟引擎。"""

__version__ = "0.1.0"
