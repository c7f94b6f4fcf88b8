"""命令行测试。"""
import tempfile
from pathlib import Path

from click.testing import CliRunner

from virtual_pet.main import cli
from virtual_pet.pet.store import PetStore


def test_create_act_status_share_visit() -> None:
    runner = CliRunner()
    with tempfile.TemporaryDirectory() as tmp:
        base = ["--data-dir", tmp]
        result = runner.invoke(cli, base + ["create", "--owner", "u1", "--name", "Mochi"])
        assert result.exit_code == 0, result.output
        assert "Created Mochi" in result.output

        pet = PetStore(Path(tmp) / "pets").list_by_owner("u1")[0]

        result = runner.invoke(cli, base + ["act", pet.id, "feed"])
        assert result.exit_code == 0, result.output
        assert "50 → 70" in result.output

        result = runner.invoke(cli, base + ["act", pet.id, "play"])
        assert result.exit_code == 2
        assert "On cooldown" in result.output

        result = runner.invoke(cli, base + ["act", pet.id, "dance"])
        assert result.exit_code == 1

        result = runner.invoke(cli, base + ["status", pet.id])
        assert result.exit_code == 0, result.output
        assert "Mochi" in result.output
        assert "Newborn" in result.output

        result = runner.invoke(cli, base + ["share", pet.id])
        assert result.exit_code == 0, result.output
        assert pet.shareable_id in result.output

        result = runner.invoke(cli, base + ["visit", pet.shareable_id, "pet", "--visitor", "v1"])
        assert result.exit_code == 0, result.output

        result = runner.invoke(cli, base + ["inbox", "--owner", "u1"])
        assert result.exit_code == 0, result.output
        assert "by visitor" in result.output


def test_unknown_pet() -> None:
    runner = CliRunner()
    with tempfile.TemporaryDirectory() as tmp:
        result = runner.invoke(cli, ["--data-dir", tmp, "status", "missing"])
        assert result.exit_code == 1
        assert "Pet not found" in result.output


def test_playdate_command() -> None:
    runner = CliRunner()
    with tempfile.TemporaryDirectory() as tmp:
        base = ["--data-dir", tmp]
        runner.invoke(cli, base + ["create", "--owner", "u1", "--name", "Mochi"])
        runner.invoke(cli, base + ["create", "--owner", "u2", "--name", "Biscuit"])
        store = PetStore(Path(tmp) / "pets")
        mine = store.list_by_owner("u1")[0]
        theirs = store.list_by_owner("u2")[0]

        # 对方没开放分享时找不到
        result = runner.invoke(cli, base + ["playdate", mine.id, theirs.id])
        assert result.exit_code == 1

        runner.invoke(cli, base + ["share", theirs.id])
        result = runner.invoke(cli, base + ["playdate", mine.id, theirs.id])
        assert result.exit_code == 0, result.output
        assert "Mochi: xp 0 →" in result.output
        assert "Biscuit: xp 0 →" in result.output

        result = runner.invoke(cli, base + ["playdate", mine.id, theirs.id])
        assert result.exit_code == 2
        assert "Next play date" in result.output
