"""WireguardClient 单元测试"""

import subprocess
from unittest.mock import MagicMock, patch

import pytest

from wgmeta.core.exceptions import ForwardingError, WireguardCommandError
from wgmeta.core.wg_client import WireguardClient


def completed(stdout="", stderr="", returncode=0):
    result = MagicMock()
    result.stdout = stdout
    result.stderr = stderr
    result.returncode = returncode
    return result


class TestWireguardClient:
    """测试 wg 命令封装"""

    @pytest.fixture
    def client(self):
        return WireguardClient("wg")

    def test_run_command(self, client):
        """测试命令输出去除首尾空白"""
        with patch("subprocess.run", return_value=completed("output\n")) as mock_run:
            assert client.run_command(["show"]) == "output"

        mock_run.assert_called_once_with(
            ["wg", "show"], input=None, capture_output=True, text=True, check=False,
        )

    def test_run_command_failure(self, client):
        """测试非零返回码"""
        with patch("subprocess.run", return_value=completed(stderr="Unable to access interface", returncode=1)):
            with pytest.raises(WireguardCommandError) as exc_info:
                client.run_command(["set", "wg9"])
        assert exc_info.value.details == "Unable to access interface"

    def test_missing_binary(self, client):
        with patch("subprocess.run", side_effect=FileNotFoundError("wg")):
            with pytest.raises(WireguardCommandError):
                client.genkey()

    def test_timeout(self, client):
        with patch("subprocess.run", side_effect=subprocess.TimeoutExpired(["wg"], 1)):
            with pytest.raises(WireguardCommandError):
                client.genkey()

    def test_gen_keypair(self, client):
        """测试生成密钥对时私钥通过 stdin 传给 pubkey"""
        with patch("subprocess.run", side_effect=[completed("PRIV=\n"), completed("PUB=\n")]) as mock_run:
            assert client.gen_keypair() == ("PRIV=", "PUB=")

        pubkey_call = mock_run.call_args_list[1]
        assert pubkey_call.args[0] == ["wg", "pubkey"]
        assert pubkey_call.kwargs["input"] == "PRIV=\n"

    def test_genpsk(self, client):
        with patch("subprocess.run", return_value=completed("PSK=\n")) as mock_run:
            assert client.genpsk() == "PSK="
        assert mock_run.call_args.args[0] == ["wg", "genpsk"]

    def test_custom_binary(self):
        client = WireguardClient("/usr/local/bin/wg")
        with patch("subprocess.run", return_value=completed("KEY=")) as mock_run:
            client.genkey()
        assert mock_run.call_args.args[0] == ["/usr/local/bin/wg", "genkey"]


class TestSetAttribute:
    """测试属性转发"""

    @pytest.fixture
    def client(self):
        return WireguardClient()

    def test_peer_attribute(self, client):
        with patch("subprocess.run", return_value=completed()) as mock_run:
            client.set_attribute("wg0", "PEER=", "AllowedIPs", "10.0.0.2/32", is_peer=True)

        assert mock_run.call_args.args[0] == [
            "wg", "set", "wg0", "peer", "PEER=", "allowed-ips", "10.0.0.2/32",
        ]
        assert mock_run.call_args.kwargs["input"] is None

    def test_interface_attribute(self, client):
        with patch("subprocess.run", return_value=completed()) as mock_run:
            client.set_attribute("wg0", "wg0", "ListenPort", "51900", is_peer=False)

        assert mock_run.call_args.args[0] == ["wg", "set", "wg0", "listen-port", "51900"]

    def test_key_passed_via_stdin(self, client):
        """测试密钥不出现在命令行参数中"""
        with patch("subprocess.run", return_value=completed()) as mock_run:
            client.set_attribute("wg0", "PEER=", "PresharedKey", "SECRET=", is_peer=True)

        args = mock_run.call_args.args[0]
        assert "SECRET=" not in args
        assert args[-2:] == ["preshared-key", "/dev/stdin"]
        assert mock_run.call_args.kwargs["input"] == "SECRET=\n"

    @pytest.mark.parametrize("attribute, is_peer", [
        ("Address", False),
        ("DNS", False),
        ("Endpoint", False),
        ("ListenPort", True),
    ])
    def test_unsupported_attribute(self, client, attribute, is_peer):
        """测试 wg-quick 专用或不适用于该 section 的属性"""
        with patch("subprocess.run") as mock_run:
            with pytest.raises(ForwardingError):
                client.set_attribute("wg0", "wg0", attribute, "x", is_peer=is_peer)
        mock_run.assert_not_called()
