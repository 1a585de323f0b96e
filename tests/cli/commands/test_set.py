"""wg-meta set 命令的单元测试"""

import click
import pytest

from conftest import ALICE_PUBLIC_KEY, CAROL_PUBLIC_KEY
from wgmeta.cli.commands.set import SetCommand, pair_arguments
from wgmeta.core.exceptions import InvalidAliasError


class TestPairArguments:
    """测试属性/值配对"""

    def test_pairs(self):
        assert pair_arguments(("name", "bob", "alias", "phone")) == [("name", "bob"), ("alias", "phone")]

    @pytest.mark.parametrize("values", [(), ("name",), ("name", "bob", "alias")])
    def test_odd_count(self, values):
        with pytest.raises(click.BadParameter):
            pair_arguments(values)


class TestSetCommand:
    """set 命令测试类"""

    def test_set_multiple_meta_attributes(self, store):
        """测试一次设置多个元数据属性"""
        SetCommand(store).execute("wg0", CAROL_PUBLIC_KEY, [("name", "caroline"), ("alias", "carol-pc")])

        section = store.get_section("wg0", CAROL_PUBLIC_KEY)
        assert section.name == "caroline"
        assert section.alias == "carol-pc"
        assert store.has_changed is True

    def test_set_by_alias(self, store):
        identifier = SetCommand(store).execute("wg0", "alice-phone", [("Name", "alice2")], by_alias=True)

        assert identifier == ALICE_PUBLIC_KEY
        assert store.get_section("wg0", ALICE_PUBLIC_KEY).name == "alice2"

    def test_unknown_alias(self, store):
        with pytest.raises(InvalidAliasError):
            SetCommand(store).execute("wg0", "nobody", [("Name", "x")], by_alias=True)

    def test_forward_non_meta(self, store, wg_client):
        """测试非元数据属性转发给 wg set"""
        SetCommand(store).execute("wg0", CAROL_PUBLIC_KEY, [("AllowedIPs", "10.0.0.30/32")])

        wg_client.set_attribute.assert_called_once_with(
            "wg0", CAROL_PUBLIC_KEY, "AllowedIPs", "10.0.0.30/32", is_peer=True,
        )
        assert store.has_changed is False

    def test_public_key_change_follows_identifier(self, store):
        """测试修改公钥后后续属性作用于新标识"""
        identifier = SetCommand(store).execute(
            "wg0",
            ALICE_PUBLIC_KEY,
            [("PublicKey", "NEW_KEY="), ("Name", "alice-new")],
            allow_non_meta=True,
        )

        assert identifier == "NEW_KEY="
        assert store.get_section("wg0", "NEW_KEY=").name == "alice-new"

    def test_lowercase_public_key(self, store):
        """测试小写的 publickey 同样更新标识，不会产生多余的条目"""
        identifier = SetCommand(store).execute(
            "wg0",
            ALICE_PUBLIC_KEY,
            [("publickey", "NEW_KEY="), ("name", "x")],
            allow_non_meta=True,
        )

        assert identifier == "NEW_KEY="
        section = store.get_section("wg0", "NEW_KEY=")
        assert section.name == "x"
        assert [entry.key for entry in section.entries] == ["Name", "PublicKey", "Alias", "AllowedIPs", None]
        assert store.translate_alias("wg0", "alice-phone") == "NEW_KEY="

    def test_public_key_on_interface_keeps_identifier(self, store):
        """测试 Interface section 设置 PublicKey 时标识不变"""
        identifier = SetCommand(store).execute(
            "wg0",
            "wg0",
            [("PublicKey", "SERVER_PUB="), ("name", "server2")],
            allow_non_meta=True,
        )

        assert identifier == "wg0"
        assert store.get_section("wg0", "wg0").name == "server2"
