"""Tests for mcprobe CLI commands."""

import json
from unittest.mock import patch

import pytest
from mcprobe.cli.discover import discover_command
from mcprobe.cli.items import get_command, items_command
from mcprobe.cli.query import ping_command, stat_command
from mcprobe.config.settings import get_settings
from mcprobe.core.errors import ExitCode
from mcprobe.main import build_parser, main
from mcprobe.protocol.stats import QueryResult


class TestDiscoverCommand:
    """Tests for the discover command."""

    def test_ports(self, capsys):
        exit_code = discover_command(ports="11211,cache1:11212")

        assert exit_code == 0
        data = json.loads(capsys.readouterr().out)
        assert data == [
            {"host": "127.0.0.1", "port": 11211},
            {"host": "cache1", "port": 11212},
        ]

    def test_lld(self, capsys):
        exit_code = discover_command(ports="11211", lld=True)

        assert exit_code == 0
        data = json.loads(capsys.readouterr().out)
        assert data == {"data": [{"{#MCHOST}": "127.0.0.1", "{#MCPORT}": "11211"}]}

    def test_config_file(self, capsys, tmp_path):
        config_file = tmp_path / "memcached.conf"
        config_file.write_text("memcached_inst_ports=10.0.0.5:11211\n")

        exit_code = discover_command(config_file=str(config_file))

        assert exit_code == 0
        assert json.loads(capsys.readouterr().out) == [{"host": "10.0.0.5", "port": 11211}]

    def test_missing_config(self, capsys, tmp_path):
        exit_code = discover_command(config_file=str(tmp_path / "absent.conf"))

        assert exit_code == ExitCode.CONFIG_ERROR
        assert "Cannot open config file" in capsys.readouterr().err

    def test_empty_ports(self, capsys):
        assert discover_command(ports="") == 0
        assert json.loads(capsys.readouterr().out) == []


class TestStatCommand:
    """Tests for the stat command."""

    def test_found(self, capsys, memcached):
        exit_code = stat_command("curr_items", host=memcached.host, port=memcached.port, timeout=1)

        assert exit_code == 0
        assert capsys.readouterr().out.strip() == "42"

    def test_not_found(self, capsys, memcached):
        exit_code = stat_command("nope", host=memcached.host, port=memcached.port, timeout=1)

        assert exit_code == ExitCode.NOT_FOUND
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "Not supported key [nope]" in captured.err

    def test_connection_refused(self, capsys, closed_port):
        exit_code = stat_command("uptime", port=closed_port, timeout=1)

        assert exit_code == ExitCode.PROVIDER_ERROR
        assert "Get memcached status error" in capsys.readouterr().err


class TestPingCommand:
    """Tests for the ping command."""

    def test_alive(self, capsys, memcached):
        exit_code = ping_command(host=memcached.host, port=memcached.port, timeout=1)

        assert exit_code == 0
        assert capsys.readouterr().out.strip() == "1"

    def test_dead_still_exits_zero(self, capsys, closed_port):
        exit_code = ping_command(port=closed_port, timeout=1)

        assert exit_code == 0
        assert capsys.readouterr().out.strip() == "0"

    def test_verbose_shows_detail(self, capsys, closed_port):
        ping_command(port=closed_port, timeout=1, verbose=True)

        assert "Cannot connect" in capsys.readouterr().err


class TestItemCommands:
    """Tests for get and items commands."""

    def test_get_status(self, capsys, memcached, tmp_path):
        exit_code = get_command(
            f"memcached.status[{memcached.port},uptime]",
            config_file=str(tmp_path / "absent.conf"),
            timeout=1,
        )

        assert exit_code == 0
        assert capsys.readouterr().out.strip() == "500"

    def test_get_discovery(self, capsys, tmp_path):
        config_file = tmp_path / "memcached.conf"
        config_file.write_text("memcached_inst_ports=11211\n")

        exit_code = get_command("memcached.discovery", config_file=str(config_file))

        assert exit_code == 0
        data = json.loads(capsys.readouterr().out)
        assert data["data"][0]["{#MCPORT}"] == "11211"

    def test_get_invalid_params(self, capsys, tmp_path):
        exit_code = get_command("memcached.ping", config_file=str(tmp_path / "absent.conf"))

        assert exit_code == ExitCode.VALIDATION_ERROR
        assert "Invalid number of parameters" in capsys.readouterr().err

    def test_items(self, capsys):
        exit_code = items_command()

        assert exit_code == 0
        out = capsys.readouterr().out
        assert "memcached.discovery" in out
        assert "memcached.status" in out
        assert "memcached.ping" in out


class TestMain:
    """Tests for the argparse entry point."""

    def test_parser_commands(self):
        parser = build_parser()

        args = parser.parse_args(["stat", "uptime", "--port", "11212", "--timeout", "2"])

        assert args.command == "stat"
        assert args.key == "uptime"
        assert args.port == "11212"
        assert args.timeout == 2.0
        assert args.host is None

    @patch("mcprobe.main.configure_logging")
    def test_discover(self, _configure, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["discover", "--ports", "11211"])

        assert exc_info.value.code == 0
        assert json.loads(capsys.readouterr().out) == [{"host": "127.0.0.1", "port": 11211}]

    @patch("mcprobe.main.configure_logging")
    def test_ping_dead(self, _configure, capsys, closed_port):
        with pytest.raises(SystemExit) as exc_info:
            main(["ping", "--port", str(closed_port), "--timeout", "1"])

        assert exc_info.value.code == 0
        assert capsys.readouterr().out.strip() == "0"

    @patch("mcprobe.main.configure_logging")
    def test_stat(self, _configure, capsys, memcached):
        with pytest.raises(SystemExit) as exc_info:
            main(["stat", "pid", "--host", memcached.host, "--port", str(memcached.port)])

        assert exc_info.value.code == 0
        assert capsys.readouterr().out.strip() == "1234"

    @patch("mcprobe.main.configure_logging")
    def test_no_command(self, _configure, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main([])

        assert exc_info.value.code == 2
        assert "usage: mcprobe" in capsys.readouterr().out

    @patch("mcprobe.main.configure_logging")
    def test_log_options_forwarded(self, configure, capsys):
        with pytest.raises(SystemExit):
            main(["--log-level", "DEBUG", "--log-format", "console", "discover", "--ports", ""])

        configure.assert_called_once_with(level="DEBUG", fmt="console")

    @patch("mcprobe.main.configure_logging")
    def test_default_host_from_settings(self, _configure, capsys, monkeypatch):
        monkeypatch.setenv("MCPROBE_DEFAULT_HOST", "10.1.2.3")
        get_settings.cache_clear()
        try:
            with patch(
                "mcprobe.cli.query.query_stat", return_value=QueryResult.hit("pid", 7)
            ) as query:
                with pytest.raises(SystemExit) as exc_info:
                    main(["stat", "pid"])
        finally:
            get_settings.cache_clear()

        assert exc_info.value.code == 0
        assert query.call_args.args[0].host == "10.1.2.3"
        assert capsys.readouterr().out.strip() == "7"
