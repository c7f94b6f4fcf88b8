"""主人通知：本地收件箱与 HTTP 回调。"""
from virtual_pet.notify.models import Notification, PetEvent, StatChange
from virtual_pet.notify.notifier import CompositeNotifier, InboxNotifier, Notifier, WebhookNotifier

__all__ = [
    "Notification",
    "PetEvent",
    "StatChange",
    "Notifier",
    "InboxNotifier",
    "WebhookNotifier",
    "CompositeNotifier",
]
