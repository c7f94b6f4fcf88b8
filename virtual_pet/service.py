"""动作调用方：结算 → 条件写入 → 追加互动记录 → 通知主人。

两个调用方可能同时对同一只宠物提交动作（主人在一台设备上、访客通过分享链接），
所以写入用版本号做条件提交：输掉的一方基于新快照重试一次（此时通常会被冷却拦下），
仍冲突则抛 WriteConflict。
"""
import sys
import threading
from datetime import datetime, timezone
from typing import Dict, Optional

from virtual_pet.interactions.log import InteractionLog
from virtual_pet.interactions.models import InteractionRecord
from virtual_pet.notify.models import PetEvent, StatChange
from virtual_pet.notify.notifier import InboxNotifier, Notifier
from virtual_pet.pet.models import VITAL_NAMES, ActorChannel, Pet, Vitals
from virtual_pet.pet.permission import PermissionChecker, get_channel_for_actor
from virtual_pet.pet.store import PetStore
from virtual_pet.sim.actions import ActionEngine, ActionResult
from virtual_pet.sim.errors import InvalidAction, OnCooldown, PetNotFound, WriteConflict
from virtual_pet.sim.playdate import (
    PLAYDATE_ACTION,
    PlayDateResult,
    PlayDateSide,
    check_playdate_cooldown,
    random_activity,
    resolve_side,
)

MAX_ATTEMPTS = 2

# 约会冷却以互动记录为准，检查到追加记录之间不能有第二个约会插进来
_PLAYDATE_LOCK = threading.Lock()


def stat_changes(old_stats: Vitals, vitals: Vitals, old_xp: int, xp: int) -> Dict[str, StatChange]:
    changes = {
        name: StatChange(before=getattr(old_stats, name), after=getattr(vitals, name))
        for name in VITAL_NAMES
    }
    changes["xp"] = StatChange(before=old_xp, after=xp)
    return changes


class PetActionService:
    """把 ActionEngine 的结果落地。"""

    def __init__(
        self,
        store: Optional[PetStore] = None,
        log: Optional[InteractionLog] = None,
        notifier: Optional[Notifier] = None,
        engine: Optional[ActionEngine] = None,
    ):
        self.store = store or PetStore()
        self.log = log or InteractionLog()
        self.notifier = notifier if notifier is not None else InboxNotifier()
        self.engine = engine or ActionEngine(self.store, self.log)

    def perform(
        self,
        pet_id: str,
        action_type: str,
        actor_id: str,
        now: Optional[datetime] = None,
    ) -> ActionResult:
        """执行一次动作并提交。InvalidAction / PetNotFound / OnCooldown 直接抛出。"""
        now = now or datetime.now(timezone.utc)
        for attempt in range(MAX_ATTEMPTS):
            result = self.engine.perform(pet_id, action_type, actor_id, now=now)
            commit = self.store.compare_and_set(pet_id, result.expected_version, result.apply)
            if commit.committed:
                self._record(result)
                self._notify(commit.pet, result)
                return result
            print(
                f"[虚拟宠物-动作] 提交冲突 pet={pet_id} action={action_type} 第 {attempt + 1} 次",
                file=sys.stderr,
                flush=True,
            )
        raise WriteConflict(pet_id)

    def perform_shared(
        self,
        shareable_id: str,
        action_type: str,
        interactor_id: str,
        now: Optional[datetime] = None,
    ) -> ActionResult:
        """通过分享令牌互动；互动身份仍由 interactor_id 决定。"""
        pet = self.store.get_by_shareable_id(shareable_id)
        if pet is None:
            raise PetNotFound(shareable_id)
        return self.perform(pet.id, action_type, interactor_id, now=now)

    def perform_play_date(
        self,
        pet_id: str,
        partner_pet_id: str,
        initiator_id: str,
        now: Optional[datetime] = None,
    ) -> PlayDateResult:
        """发起人带自己的宠物与另一只宠物约会。

        对方宠物需开放分享，或同样属于发起人。活动由引擎的随机源抽取，
        两只宠物各自走条件写入；记录只追加在发起方宠物上。
        """
        now = now or datetime.now(timezone.utc)
        if pet_id == partner_pet_id:
            raise InvalidAction(PLAYDATE_ACTION, "A pet cannot go on a play date with itself")

        with _PLAYDATE_LOCK:
            pet = self.store.get(pet_id)
            if pet is None:
                raise PetNotFound(pet_id)
            if not PermissionChecker.can_manage(get_channel_for_actor(pet, initiator_id)):
                raise InvalidAction(PLAYDATE_ACTION, "Play dates start from your own pet")
            partner = self.store.get(partner_pet_id)
            if partner is None or (partner.owner_id != initiator_id and not PermissionChecker.can_visit(partner)):
                raise PetNotFound(partner_pet_id)

            last_at = self.log.most_recent_by_interactor(initiator_id, PLAYDATE_ACTION)
            cooldown = check_playdate_cooldown(last_at, now)
            if cooldown.is_on_cooldown:
                raise OnCooldown(cooldown.remaining_seconds)

            activity = random_activity(self.engine.rng)
            sides: Dict[str, PlayDateSide] = {}

            def play(key: str, partner_name: str):
                def mutate(current: Pet) -> Pet:
                    side = resolve_side(current, activity, partner_name)
                    sides[key] = side
                    return side.apply(current, now)
                return mutate

            self.store.update(pet.id, play("pet", partner.name))
            self.store.update(partner.id, play("partner", pet.name))
            self.log.append(InteractionRecord(
                pet_id=pet.id,
                interactor_id=initiator_id,
                action_type=PLAYDATE_ACTION,
                channel=ActorChannel.PLAYDATE,
                timestamp=now,
                other_pet_id=partner.id,
                activity_id=activity.id,
            ))

        result = PlayDateResult(
            activity=activity,
            initiator_id=initiator_id,
            performed_at=now,
            pet=sides["pet"],
            partner=sides["partner"],
        )
        for side in (result.pet, result.partner):
            self._emit(side.owner_id, PetEvent(
                owner_id=side.owner_id,
                pet_id=side.pet_id,
                pet_name=side.pet_name,
                action_type=PLAYDATE_ACTION,
                performed_by=ActorChannel.PLAYDATE,
                interactor_id=initiator_id,
                stat_changes=stat_changes(side.old_stats, side.vitals, side.old_xp, side.xp),
                messages=side.messages,
                metadata={"activity_name": activity.name, "partner_name": side.partner_name},
                timestamp=now,
            ))
        return result

    def _record(self, result: ActionResult) -> None:
        self.log.append(InteractionRecord(
            pet_id=result.pet_id,
            interactor_id=result.actor_id,
            action_type=result.action_type,
            channel=result.channel,
            timestamp=result.performed_at,
        ))

    def _notify(self, pet: Pet, result: ActionResult) -> None:
        self._emit(pet.owner_id, PetEvent(
            owner_id=pet.owner_id,
            pet_id=pet.id,
            pet_name=pet.name,
            action_type=result.action_type,
            performed_by=result.channel,
            interactor_id=result.actor_id,
            stat_changes=stat_changes(result.old_stats, result.vitals, result.old_xp, result.xp),
            messages=result.notifications,
            timestamp=result.performed_at,
        ))

    def _emit(self, owner_id: str, event: PetEvent) -> None:
        try:
            self.notifier.emit(owner_id, event)
        except Exception as e:
            # 通知失败不回滚动作
            print(f"[虚拟宠物-通知] 发送失败 pet={event.pet_id}: {e}", file=sys.stderr, flush=True)
