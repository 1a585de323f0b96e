"""端到端集成测试

通过 click 的 CliRunner 运行完整的 wg-meta 工作流：
- 查看接口
- 设置元数据并写回（包括 dry-run）
- 启用、禁用 section
- 添加 Peer
- 错误处理
"""

import json
import warnings
from pathlib import Path
from typing import List
from unittest.mock import patch

import pytest
import yaml
from click.testing import CliRunner

from conftest import ALICE_PUBLIC_KEY, CAROL_PUBLIC_KEY, WG0_CONFIG
from wgmeta.cli.main import cli
from wgmeta.core.config_store import ConfigStore


class CliEnvironment:
    """CLI 测试环境"""

    def __init__(self, wireguard_home: Path, wg_client):
        self.wireguard_home = wireguard_home
        self.wg_client = wg_client
        self.settings_path = wireguard_home / "settings" / "wg-meta.yaml"
        self.runner = CliRunner()

    def invoke(self, args: List[str], dry_run: bool = False):
        """运行 wg-meta 命令

        Args:
            args: 子命令及其参数
            dry_run: 是否加上 --dry-run
        """
        base = [
            "--no-color",
            "--settings", str(self.settings_path),
            "--wireguard-home", str(self.wireguard_home),
        ]
        if dry_run:
            base.append("--dry-run")
        with patch("wgmeta.cli.utils.store_utils.WireguardClient", return_value=self.wg_client):
            return self.runner.invoke(cli, base + args)

    def reload(self) -> ConfigStore:
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            return ConfigStore(self.wireguard_home, wg_client=self.wg_client)


@pytest.fixture
def env(wireguard_home, wg_client):
    return CliEnvironment(wireguard_home, wg_client)


class TestShowWorkflow:
    """查看接口"""

    def test_show_table(self, env):
        result = env.invoke(["show"])

        assert result.exit_code == 0
        assert "interface: wg0" in result.output
        assert "alice-phone" in result.output

    def test_show_json(self, env):
        result = env.invoke(["show", "wg0", "--json"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["wg0"]["section_order"] == ["wg0", ALICE_PUBLIC_KEY, CAROL_PUBLIC_KEY]

    def test_show_does_not_write(self, env):
        env.invoke(["show"])
        assert sorted(p.name for p in env.wireguard_home.glob("*.conf*")) == ["wg0.conf", "wg1.conf"]


class TestSetWorkflow:
    """设置元数据并写回"""

    def test_set_and_commit(self, env):
        """测试设置别名后覆盖写入并可重新加载"""
        result = env.invoke(["set", "wg0", CAROL_PUBLIC_KEY, "alias", "carol-pc", "name", "Carol"])

        assert result.exit_code == 0
        assert "Written" in result.output
        store = env.reload()
        assert store.translate_alias("wg0", "carol-pc") == CAROL_PUBLIC_KEY
        assert store.get_section("wg0", CAROL_PUBLIC_KEY).name == "Carol"

    def test_set_dry_run(self, env):
        """测试 dry-run 不修改原配置"""
        result = env.invoke(["set", "wg0", "alice-phone", "name", "alice2", "--alias"], dry_run=True)

        assert result.exit_code == 0
        assert (env.wireguard_home / "wg0.conf").read_text() == WG0_CONFIG
        assert "#+Name = alice2" in (env.wireguard_home / "wg0.conf_dryrun").read_text()

    def test_set_forwards_non_meta(self, env):
        """测试非元数据属性只转发给 wg，不写文件"""
        result = env.invoke(["set", "wg0", "wg0", "ListenPort", "51900"])

        assert result.exit_code == 0
        env.wg_client.set_attribute.assert_called_once_with("wg0", "wg0", "ListenPort", "51900", is_peer=False)
        assert (env.wireguard_home / "wg0.conf").read_text() == WG0_CONFIG

    def test_odd_number_of_arguments(self, env):
        result = env.invoke(["set", "wg0", "wg0", "name"])
        assert result.exit_code == 2

    def test_invalid_interface(self, env):
        result = env.invoke(["set", "wg9", "wg9", "name", "x"])

        assert result.exit_code == 1
        assert "Invalid interface name `wg9`" in result.output


class TestToggleWorkflow:
    """启用和禁用"""

    def test_disable_comments_out_section(self, env):
        """测试禁用后整段被注释掉"""
        result = env.invoke(["disable", "wg0", "alice-phone", "--alias"])
        assert result.exit_code == 0

        text = (env.wireguard_home / "wg0.conf").read_text()
        assert "#-[Peer]" in text
        assert f"#-PublicKey = {ALICE_PUBLIC_KEY}" in text
        assert "#-#+Disabled = 1" in text
        assert env.reload().get_section("wg0", ALICE_PUBLIC_KEY).is_disabled is True

    def test_enable_again(self, env):
        env.invoke(["disable", "wg0", CAROL_PUBLIC_KEY])
        result = env.invoke(["enable", "wg0", CAROL_PUBLIC_KEY])

        assert result.exit_code == 0
        assert "#-[Peer]" not in (env.wireguard_home / "wg0.conf").read_text()

    def test_enable_enabled_section(self, env):
        """测试重复启用只输出警告"""
        result = env.invoke(["enable", "wg0", CAROL_PUBLIC_KEY])

        assert result.exit_code == 0
        assert "already enabled" in result.output


class TestAddPeerWorkflow:
    """添加 Peer"""

    def test_addpeer(self, env):
        result = env.invoke(["addpeer", "wg0", "bob", "10.0.0.5/32", "bob-phone"])

        assert result.exit_code == 0
        assert "PrivateKey = CLIENT_PRIVATE_KEY=" in result.stdout
        assert "PublicKey = SERVER_PUBLIC_KEY=" in result.stdout

        store = env.reload()
        assert store.translate_alias("wg0", "bob-phone") == "CLIENT_PUBLIC_KEY="
        assert store.get_section_list("wg0")[-1] == "CLIENT_PUBLIC_KEY="

    def test_addpeer_alias_conflict(self, env):
        result = env.invoke(["addpeer", "wg0", "bob", "10.0.0.5/32", "alice-phone"])

        assert result.exit_code == 1
        assert (env.wireguard_home / "wg0.conf").read_text() == WG0_CONFIG


class TestErrorHandling:
    """错误处理"""

    def test_parse_error(self, env):
        (env.wireguard_home / "wg2.conf").write_text("[Peer]\nAllowedIPs = 10.0.0.2/32\n")
        result = env.invoke(["show"])

        assert result.exit_code == 1
        assert "identifying information" in result.output

    def test_settings_file(self, env, wg_client):
        """测试从设置文件读取 wireguard 目录"""
        env.settings_path.parent.mkdir(parents=True)
        env.settings_path.write_text(yaml.dump({"wireguard_home": str(env.wireguard_home)}))

        with patch("wgmeta.cli.utils.store_utils.WireguardClient", return_value=wg_client):
            result = env.runner.invoke(cli, ["--settings", str(env.settings_path), "show", "wg1"])

        assert result.exit_code == 0
        assert "interface: wg1" in result.output

    def test_invalid_settings(self, env):
        env.settings_path.parent.mkdir(parents=True)
        env.settings_path.write_text(yaml.dump({"wg_meta_prefix": "+"}))

        result = env.invoke(["show"])
        assert result.exit_code != 0
