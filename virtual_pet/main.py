"""命令行入口：新建宠物、执行动作、访客互动、约会、查看状态与分享开关。"""
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from virtual_pet import __version__
from virtual_pet.config import DATA_DIR
from virtual_pet.interactions.log import InteractionLog
from virtual_pet.notify.notifier import CompositeNotifier, InboxNotifier, WebhookNotifier
from virtual_pet.pet.models import Pet
from virtual_pet.pet.onboarding import create_pet
from virtual_pet.pet.shop import toggle_sharing
from virtual_pet.pet.store import PetStore
from virtual_pet.service import PetActionService
from virtual_pet.sim.actions import ActionResult, available_actions, pet_status
from virtual_pet.sim.age import format_age_display
from virtual_pet.sim.cooldown import cooldown_breakdown, format_cooldown_time
from virtual_pet.sim.errors import EngineError, OnCooldown
from virtual_pet.sim.progression import progress_to_next_stage, stage_label
from virtual_pet.sim.social import format_social_bonus_message
from virtual_pet.sim.streak import get_streak_bonus, streak_tier_info

console = Console()


class Context:
    """按 --data-dir 组装存储与服务。"""

    def __init__(self, data_dir: Path):
        self.store = PetStore(data_dir / "pets")
        self.log = InteractionLog(data_dir / "interactions")
        self.inbox = InboxNotifier(data_dir / "notifications")
        self.service = PetActionService(
            store=self.store,
            log=self.log,
            notifier=CompositeNotifier([self.inbox, WebhookNotifier()]),
        )

    def load(self, pet_id: str) -> Pet:
        pet = self.store.get(pet_id)
        if pet is None:
            console.print(f"[red]✗ Pet not found: {pet_id}[/red]")
            sys.exit(1)
        return pet


def print_result(result: ActionResult) -> None:
    table = Table(title=f"{result.effects.name} ✓", show_header=False)
    table.add_column("Stat", style="cyan")
    table.add_column("Value", style="green")
    for name, value in result.vitals.model_dump().items():
        table.add_row(name, f"{getattr(result.old_stats, name)} → {value}")
    table.add_row("xp", f"{result.old_xp} → {result.xp}")
    if result.coins_earned:
        table.add_row("coins", f"+{result.coins_earned}")
    if result.streak is not None:
        table.add_row("streak", str(result.streak.new_streak))
    console.print(table)
    for message in result.notifications:
        console.print(f"  {message}", style="bold yellow")


@click.group()
@click.version_option(__version__)
@click.option(
    "--data-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=DATA_DIR,
    help="Data directory",
)
@click.pass_context
def cli(ctx: click.Context, data_dir: Path):
    """Virtual pet simulator."""
    ctx.obj = Context(data_dir)


@cli.command()
@click.option("--owner", "-u", required=True, help="Owner user id")
@click.option("--name", "-n", required=True, help="Pet name")
@click.option("--species", "-s", default="cat", help="Species")
@click.option("--breed", default=None, help="Breed")
@click.pass_obj
def create(obj: Context, owner: str, name: str, species: str, breed: Optional[str]):
    """Create a new pet."""
    pet = create_pet(owner, name, species=species, store=obj.store, breed=breed)
    console.print(f"  ✓ Created {pet.name} ({pet.id})", style="green")


def _run(fn, *args) -> None:
    try:
        print_result(fn(*args))
    except OnCooldown as e:
        console.print(f"[yellow]⏳ On cooldown: {format_cooldown_time(e.remaining_seconds)}[/yellow]")
        sys.exit(2)
    except EngineError as e:
        console.print(f"[red]✗ {e}[/red]")
        sys.exit(1)


@cli.command()
@click.argument("pet_id")
@click.argument("action_type")
@click.pass_obj
def act(obj: Context, pet_id: str, action_type: str):
    """Perform an owner action (feed, play, clean, rest, exercise, treat, work)."""
    pet = obj.load(pet_id)
    _run(obj.service.perform, pet_id, action_type, pet.owner_id)


@cli.command()
@click.argument("shareable_id")
@click.argument("action_type")
@click.option("--visitor", "-v", required=True, help="Visitor id")
@click.pass_obj
def visit(obj: Context, shareable_id: str, action_type: str, visitor: str):
    """Interact with a shared pet as a visitor (pet, treat)."""
    _run(obj.service.perform_shared, shareable_id, action_type, visitor)


@cli.command()
@click.argument("pet_id")
@click.argument("partner_pet_id")
@click.pass_obj
def playdate(obj: Context, pet_id: str, partner_pet_id: str):
    """Take your pet on a play date with another pet."""
    pet = obj.load(pet_id)
    try:
        result = obj.service.perform_play_date(pet_id, partner_pet_id, pet.owner_id)
    except OnCooldown as e:
        console.print(f"[yellow]⏳ Next play date in {format_cooldown_time(e.remaining_seconds)}[/yellow]")
        sys.exit(2)
    except EngineError as e:
        console.print(f"[red]✗ {e}[/red]")
        sys.exit(1)
    console.print(f"  {result.activity.emoji} {result.activity.name}", style="bold green")
    for side in (result.pet, result.partner):
        console.print(f"  {side.pet_name}: xp {side.old_xp} → {side.xp}")
        for message in side.messages[1:]:
            console.print(f"    {message}", style="bold yellow")


@cli.command()
@click.argument("pet_id")
@click.option("--enable/--disable", default=True, help="Enable or disable sharing")
@click.pass_obj
def share(obj: Context, pet_id: str, enable: bool):
    """Toggle the public share link."""
    obj.load(pet_id)
    pet = toggle_sharing(obj.store, pet_id, enable)
    state = "enabled" if pet.sharing_enabled else "disabled"
    console.print(f"  ✓ Sharing {state} (token: {pet.shareable_id})", style="green")


@cli.command()
@click.argument("pet_id")
@click.pass_obj
def status(obj: Context, pet_id: str):
    """Show a pet's stats, progression, streak and cooldown."""
    pet = obj.load(pet_id)
    progress = progress_to_next_stage(pet.xp)
    summary = pet_status(pet.vitals)
    cooldown = obj.service.engine.cooldown_status(pet_id, pet.owner_id)
    streak_tier = streak_tier_info(get_streak_bonus(pet.current_streak).tier)
    unique = obj.log.count_unique(pet_id, exclude_actor_id=pet.owner_id).unique_actors

    table = Table(title=f"{pet.name} ({pet.species})", show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="green")
    for name, value in pet.vitals.model_dump().items():
        table.add_row(name, str(value))
    table.add_row("status", f"{summary['status']} - {summary['message']}")
    table.add_row("stage", f"{stage_label(pet.stage)} ({progress.percentage}%, {progress.message})")
    table.add_row("age", format_age_display(pet.age_in_months))
    table.add_row("streak", f"{pet.current_streak} (best {pet.longest_streak}) {streak_tier['emoji']} {streak_tier['name']}")
    table.add_row("coins", str(pet.coins))
    table.add_row("friends", format_social_bonus_message(unique))
    table.add_row("cooldown", format_cooldown_time(cooldown.remaining_seconds))
    breakdown = cooldown_breakdown(cooldown.info)
    if breakdown:
        table.add_row("bonus", breakdown)
    actions = ", ".join(a["type"] for a in available_actions(pet) if not a["disabled"])
    table.add_row("actions", actions or "-")
    console.print(table)


@cli.command()
@click.option("--owner", "-u", required=True, help="Owner user id")
@click.option("--limit", "-l", default=10, help="Number of notifications")
@click.pass_obj
def inbox(obj: Context, owner: str, limit: int):
    """Show recent notifications for an owner."""
    for n in obj.inbox.list_for_user(owner, limit=limit):
        flag = " " if n.read else "•"
        console.print(f"{flag} {n.event.pet_name}: {n.event.action_type} by {n.event.performed_by}")
        for message in n.event.messages:
            console.print(f"    {message}", style="dim")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
