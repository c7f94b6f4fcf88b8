"""引擎错误。OnCooldown 与 WriteConflict 是暂时性的，调用方可以重试；其余直接上报。"""


class EngineError(Exception):
    """所有引擎错误的基类。"""
    retryable = False


class InvalidAction(EngineError):
    """该身份下不存在的动作，或动作尚未解锁。"""

    def __init__(self, action_type: str, reason: str = ""):
        self.action_type = action_type
        self.reason = reason
        super().__init__(reason or f"Invalid action type: {action_type}")


class PetNotFound(EngineError):
    """宠物不存在（或访客访问了未开放分享的宠物）。"""

    def __init__(self, pet_id: str):
        self.pet_id = pet_id
        super().__init__(f"Pet not found: {pet_id}")


class OnCooldown(EngineError):
    retryable = True

    def __init__(self, remaining_seconds: int):
        self.remaining_seconds = remaining_seconds
        super().__init__(f"Please wait {remaining_seconds} seconds before performing another action.")


class WriteConflict(EngineError):
    """并发提交时输给了另一次写入。"""
    retryable = True

    def __init__(self, pet_id: str):
        self.pet_id = pet_id
        super().__init__(f"Concurrent update on pet {pet_id}")


class InsufficientCoins(EngineError):
    def __init__(self, needed: int, available: int):
        self.needed = needed
        self.available = available
        super().__init__("Not enough coins")


class ItemNotOwned(EngineError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Item not in inventory: {name}")


class StageLocked(EngineError):
    """功能需要更高的成长阶段。"""

    def __init__(self, feature: str, required_stage: int):
        self.feature = feature
        self.required_stage = required_stage
        super().__init__(f"{feature} unlocks at stage {required_stage}")
