"""测试共用的配置样例和 fixture"""

import tempfile
from pathlib import Path
from unittest.mock import Mock

import pytest

from wgmeta.core.config_store import ConfigStore
from wgmeta.core.wg_client import WireguardClient


SERVER_PRIVATE_KEY = "SERVER_PRIVATE_KEY_AAAAAAAAAAAAAAAAAAAAAAAAAA="
ALICE_PUBLIC_KEY = "ALICE_PUBLIC_KEY_BBBBBBBBBBBBBBBBBBBBBBBBBBBBB="
CAROL_PUBLIC_KEY = "CAROL_PUBLIC_KEY_CCCCCCCCCCCCCCCCCCCCCCCCCCCCC="

WG0_CONFIG = f"""# managed by hand
[Interface]
#+Name = server
Address = 10.0.0.1/24
ListenPort = 51820
PrivateKey = {SERVER_PRIVATE_KEY}

[Peer]
#+Name = alice
PublicKey = {ALICE_PUBLIC_KEY}
#+Alias = alice-phone
AllowedIPs = 10.0.0.2/32
# alice's laptop

[Peer]
#+Name = carol
PublicKey = {CAROL_PUBLIC_KEY}
AllowedIPs = 10.0.0.3/32
Endpoint = carol.example.org:51820
"""

WG1_CONFIG = """[Interface]
Address = 10.1.0.1/24
ListenPort = 51821
PrivateKey = WG1_PRIVATE_KEY=
"""


@pytest.fixture
def wireguard_home():
    """包含 wg0.conf 和 wg1.conf 的临时目录"""
    with tempfile.TemporaryDirectory() as tmp:
        home = Path(tmp)
        (home / "wg0.conf").write_text(WG0_CONFIG)
        (home / "wg1.conf").write_text(WG1_CONFIG)
        yield home


@pytest.fixture
def wg_client():
    """不调用真实 wg 的客户端"""
    client = Mock(spec=WireguardClient)
    client.gen_keypair.return_value = ("CLIENT_PRIVATE_KEY=", "CLIENT_PUBLIC_KEY=")
    client.pubkey.return_value = "SERVER_PUBLIC_KEY="
    return client


@pytest.fixture
def store(wireguard_home, wg_client):
    """加载样例目录的 ConfigStore"""
    return ConfigStore(wireguard_home, wg_client=wg_client)
