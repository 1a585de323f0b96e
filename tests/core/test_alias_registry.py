"""别名注册表单元测试"""

import pytest

from wgmeta.core.alias_registry import AliasRegistry
from wgmeta.core.exceptions import AliasAlreadyExistsError, InvalidAliasError


class TestAliasRegistry:
    """测试 AliasRegistry"""

    def test_bind_and_resolve(self):
        """测试绑定和翻译"""
        registry = AliasRegistry("wg0")
        registry.bind("alice", "KEY_A=")

        assert registry.resolve("alice") == "KEY_A="
        assert "alice" in registry
        assert len(registry) == 1

    def test_rebind_same_identifier(self):
        """测试同一别名重复绑定到同一标识"""
        registry = AliasRegistry("wg0")
        registry.bind("alice", "KEY_A=")
        registry.bind("alice", "KEY_A=")
        assert len(registry) == 1

    def test_bind_conflict(self):
        """测试别名已绑定到其他标识"""
        registry = AliasRegistry("wg0")
        registry.bind("alice", "KEY_A=")

        with pytest.raises(AliasAlreadyExistsError) as exc_info:
            registry.bind("alice", "KEY_B=")
        assert exc_info.value.details["identifier"] == "KEY_A="
        assert registry.resolve("alice") == "KEY_A="

    def test_resolve_unknown(self):
        """测试翻译不存在的别名"""
        registry = AliasRegistry("wg0")
        with pytest.raises(InvalidAliasError):
            registry.resolve("nobody")

    def test_release_and_alias_of(self):
        """测试释放别名和反向查找"""
        registry = AliasRegistry("wg0")
        registry.bind("alice", "KEY_A=")
        assert registry.alias_of("KEY_A=") == "alice"

        registry.release("alice")
        registry.release("alice")
        assert registry.alias_of("KEY_A=") is None
        assert "alice" not in registry

    def test_registries_are_independent(self):
        """测试不同接口的注册表互不影响"""
        wg0 = AliasRegistry("wg0")
        wg1 = AliasRegistry("wg1")
        wg0.bind("alice", "KEY_A=")
        wg1.bind("alice", "KEY_B=")

        assert wg0.resolve("alice") == "KEY_A="
        assert wg1.resolve("alice") == "KEY_B="

    def test_to_dict_and_equality(self):
        """测试转换为字典和相等比较"""
        first = AliasRegistry("wg0")
        second = AliasRegistry("wg0")
        first.bind("alice", "KEY_A=")
        second.bind("alice", "KEY_A=")

        assert first.to_dict() == {"alice": "KEY_A="}
        assert first == second
