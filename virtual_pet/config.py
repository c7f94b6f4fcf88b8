"""虚拟宠物全局配置与路径。"""
import os
from pathlib import Path

# 项目根目录（virtual_pet 包所在目录的上一级）
ROOT_DIR = Path(__file__).resolve().parent.parent
# 数据目录：宠物档案、互动记录、通知收件箱
DATA_DIR = Path(os.environ.get("VIRTUAL_PET_DATA_DIR", "").strip() or ROOT_DIR / "data")
PETS_DIR = DATA_DIR / "pets"
INTERACTIONS_DIR = DATA_DIR / "interactions"
NOTIFICATIONS_DIR = DATA_DIR / "notifications"

# 数值属性（饱腹、心情、清洁、体力）
DEFAULT_STAT = 50
STAT_MIN = 0
STAT_MAX = 100

# 冷却（秒）
BASE_COOLDOWN_SECONDS = 600  # 10 分钟
PLAYDATE_COOLDOWN_SECONDS = 6 * 60 * 60  # 约会：按发起人计，6 小时

# 衰减与成长：1 个真实日 = 1 个虚拟月
DECAY_PER_DAY = 5
AGING_STAT_THRESHOLD = 45
AGING_MIN_STATS = 3  # 4 项中至少 3 项达标

# 经济
STARTING_COINS = 100
WORK_COIN_RANGE = (5, 20)
WORK_MIN_STAGE = 2  # 少年期解锁打工
ACCESSORY_MIN_STAGE = 3  # 成年期解锁饰品

# 分享
SHAREABLE_ID_LENGTH = 12

# 通知
WEBHOOK_URL = os.environ.get("VIRTUAL_PET_WEBHOOK_URL", "").strip()
NOTIFY_TIMEOUT_SECONDS = 5


def ensure_dirs() -> None:
    """确保数据目录存在。"""
    for d in (DATA_DIR, PETS_DIR, INTERACTIONS_DIR, NOTIFICATIONS_DIR):
        d.mkdir(parents=True, exist_ok=True)
