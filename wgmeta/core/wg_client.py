"""wg 命令封装类

封装对外部 `wg` 工具的调用：密钥生成、公钥推导，以及把非元数据属性转发给 `wg set`。
"""

import subprocess
from typing import Dict, List, Optional, Tuple

from wgmeta.core.exceptions import ForwardingError, WireguardCommandError
from wgmeta.core.logger import get_logger


logger = get_logger("wg_client")

# 配置文件属性 -> `wg set` 参数；值为 True 表示通过 stdin 传入（wg 从文件读取密钥）
INTERFACE_SET_ARGUMENTS: Dict[str, Tuple[str, bool]] = {
    "ListenPort": ("listen-port", False),
    "FwMark": ("fwmark", False),
    "PrivateKey": ("private-key", True),
}

PEER_SET_ARGUMENTS: Dict[str, Tuple[str, bool]] = {
    "PresharedKey": ("preshared-key", True),
    "Endpoint": ("endpoint", False),
    "AllowedIPs": ("allowed-ips", False),
    "PersistentKeepalive": ("persistent-keepalive", False),
}


class WireguardClient:
    """wg 命令客户端"""

    def __init__(self, wg_binary: str = "wg"):
        """初始化 WireguardClient

        Args:
            wg_binary: wg 可执行文件名或路径
        """
        self.wg_binary = wg_binary

    def run_command(self, args: List[str], input_text: Optional[str] = None) -> str:
        """运行 wg 命令

        Args:
            args: wg 之后的参数列表
            input_text: 写入 stdin 的内容

        Returns:
            去除首尾空白的标准输出

        Raises:
            WireguardCommandError: 命令不存在或返回非零
        """
        cmd = [self.wg_binary] + args
        # 不记录 stdin，其中可能是私钥
        logger.debug("Running wg command", command=" ".join(cmd))

        try:
            result = subprocess.run(
                cmd,
                input=input_text,
                capture_output=True,
                text=True,
                check=False,
            )
        except (OSError, subprocess.SubprocessError) as e:
            logger.error("wg command error", command=" ".join(cmd), error=str(e))
            raise WireguardCommandError(f"Failed to execute wg command: {e}") from e

        if result.returncode != 0:
            error_msg = result.stderr or result.stdout
            logger.error(
                "wg command failed",
                command=" ".join(cmd),
                return_code=result.returncode,
                error=error_msg,
            )
            raise WireguardCommandError(
                f"wg command failed: {' '.join(cmd)}",
                details=error_msg,
            )

        return result.stdout.strip()

    def genkey(self) -> str:
        """生成新的私钥"""
        return self.run_command(["genkey"])

    def genpsk(self) -> str:
        """生成新的预共享密钥"""
        return self.run_command(["genpsk"])

    def pubkey(self, private_key: str) -> str:
        """由私钥推导公钥"""
        return self.run_command(["pubkey"], input_text=private_key + "\n")

    def gen_keypair(self) -> Tuple[str, str]:
        """生成 (私钥, 公钥)"""
        private_key = self.genkey()
        return private_key, self.pubkey(private_key)

    def set_attribute(
        self,
        interface: str,
        identifier: str,
        attribute: str,
        value: str,
        is_peer: bool,
    ) -> None:
        """通过 `wg set` 修改运行中接口的属性

        Args:
            interface: 接口名
            identifier: Peer 的公钥（对 Interface 忽略）
            attribute: 配置文件中的属性名，例如 `ListenPort`
            value: 新值
            is_peer: 目标是否为 Peer section

        Raises:
            ForwardingError: 属性不能通过 wg set 设置（例如 wg-quick 专用的 Address）
            WireguardCommandError: 命令执行失败
        """
        table = PEER_SET_ARGUMENTS if is_peer else INTERFACE_SET_ARGUMENTS
        if attribute not in table:
            raise ForwardingError(
                f"Attribute `{attribute}` cannot be forwarded to `wg set`",
                details={"interface": interface, "attribute": attribute},
            )

        argument, via_stdin = table[attribute]
        args = ["set", interface]
        if is_peer:
            args += ["peer", identifier]
        if via_stdin:
            args += [argument, "/dev/stdin"]
            input_text = value + "\n"
        else:
            args += [argument, value]
            input_text = None

        self.run_command(args, input_text=input_text)
        logger.info("Forwarded attribute to wg", interface=interface, attribute=attribute)
