"""别名注册表

每个接口一份，将别名映射到 section 标识。别名在接口内唯一，不同接口之间互不影响。
"""

from typing import Dict, Iterator, Optional, Tuple

from wgmeta.core.exceptions import AliasAlreadyExistsError, InvalidAliasError


class AliasRegistry:
    """别名 -> 标识 的映射"""

    def __init__(self, interface: str = ""):
        self.interface = interface
        self._aliases: Dict[str, str] = {}

    def bind(self, alias: str, identifier: str) -> None:
        """绑定别名

        同一别名重复绑定到同一标识是允许的。

        Raises:
            AliasAlreadyExistsError: 别名已绑定到其他标识
        """
        current = self._aliases.get(alias)
        if current is not None and current != identifier:
            raise AliasAlreadyExistsError(
                f"Alias `{alias}` is already defined on interface `{self.interface}`",
                details={"alias": alias, "identifier": current},
            )
        self._aliases[alias] = identifier

    def resolve(self, alias: str) -> str:
        """将别名翻译为标识

        Raises:
            InvalidAliasError: 别名不存在
        """
        try:
            return self._aliases[alias]
        except KeyError:
            raise InvalidAliasError(
                f"Invalid alias `{alias}` in interface `{self.interface}`",
                details={"alias": alias},
            ) from None

    def release(self, alias: str) -> None:
        self._aliases.pop(alias, None)

    def alias_of(self, identifier: str) -> Optional[str]:
        for alias, target in self._aliases.items():
            if target == identifier:
                return alias
        return None

    def items(self) -> Iterator[Tuple[str, str]]:
        return iter(list(self._aliases.items()))

    def to_dict(self) -> Dict[str, str]:
        return dict(self._aliases)

    def __contains__(self, alias: str) -> bool:
        return alias in self._aliases

    def __len__(self) -> int:
        return len(self._aliases)

    def __eq__(self, other) -> bool:
        if not isinstance(other, AliasRegistry):
            return NotImplemented
        return self._aliases == other._aliases

    def __repr__(self) -> str:
        return f"AliasRegistry({self.interface!r}, {self._aliases!r})"
