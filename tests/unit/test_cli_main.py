"""
Unit tests for CLI main entry point.

Tests CLI infrastructure including global options, configuration loading
and the serve and get commands.
"""

from unittest.mock import MagicMock, patch

import pytest
import requests
from click.testing import CliRunner

from statsview._version import __version__
from statsview.cli.main import cli


@pytest.fixture(autouse=True)
def no_logging_setup():
    """Keep CLI invocations from reconfiguring global logging."""
    with patch("statsview.cli.main.setup_logging") as setup_logging:
        yield setup_logging


class TestCLIMain:
    """Test CLI main entry point."""
    
    def test_cli_help(self):
        runner = CliRunner()
        result = runner.invoke(cli, ['--help'])
        
        assert result.exit_code == 0
        assert 'Statsview' in result.output
        assert '--config' in result.output
        assert '--log-level' in result.output
        assert 'serve' in result.output
        assert 'get' in result.output
    
    def test_cli_version(self):
        runner = CliRunner()
        result = runner.invoke(cli, ['--version'])
        
        assert result.exit_code == 0
        assert __version__ in result.output
    
    def test_invalid_config_exits(self, temp_dir):
        config_path = temp_dir / "config.yaml"
        config_path.write_text("logging:\n  level: LOUD\n")
        
        runner = CliRunner()
        result = runner.invoke(cli, ['--config', str(config_path), 'get'])
        
        assert result.exit_code == 1
        assert 'Invalid configuration' in result.output
    
    def test_log_level_override(self, temp_dir, no_logging_setup):
        runner = CliRunner()
        with patch("statsview.cli.serve.requests.get") as get:
            get.return_value = MagicMock(text="")
            runner.invoke(cli, ['--config', str(temp_dir / "none.yaml"), '--log-level', 'debug', 'get'])
        
        assert no_logging_setup.call_args.kwargs["level"] == "DEBUG"


class TestGetCommand:
    """Test the get command."""
    
    def test_builds_request_from_options(self, temp_dir):
        response = MagicMock(text='[\n  {\n    "cpu": 42\n  }\n]')
        runner = CliRunner()
        
        with patch("statsview.cli.serve.requests.get", return_value=response) as get:
            result = runner.invoke(cli, [
                '--config', str(temp_dir / "none.yaml"),
                'get', '--url', 'http://stats.local:11000/', '-f', 'json', '-s', 'cpu',
            ])
        
        assert result.exit_code == 0
        assert '"cpu": 42' in result.output
        get.assert_called_once_with(
            'http://stats.local:11000/stats',
            params={'format': 'json', 'stats': 'cpu'},
            timeout=5.0,
        )
    
    def test_default_url_from_configuration(self, temp_dir):
        config_path = temp_dir / "config.yaml"
        config_path.write_text("server:\n  port: 19000\n")
        runner = CliRunner()
        
        with patch("statsview.cli.serve.requests.get", return_value=MagicMock(text="cpu=1\n")) as get:
            result = runner.invoke(cli, ['--config', str(config_path), 'get'])
        
        assert result.exit_code == 0
        assert result.output.endswith("cpu=1\n")
        assert get.call_args.args[0] == 'http://127.0.0.1:19000/stats'
        assert get.call_args.kwargs['params'] == {}
    
    def test_request_failure(self, temp_dir):
        runner = CliRunner()
        
        with patch(
            "statsview.cli.serve.requests.get",
            side_effect=requests.ConnectionError("connection refused"),
        ):
            result = runner.invoke(cli, ['--config', str(temp_dir / "none.yaml"), 'get'])
        
        assert result.exit_code == 1
        assert 'Failed to fetch stats' in result.output


class TestServeCommand:
    """Test the serve command."""
    
    def test_serve_uses_options_over_configuration(self, temp_dir):
        config_path = temp_dir / "config.yaml"
        config_path.write_text("server:\n  role: meta\n  local_ip: 10.0.0.9\n")
        runner = CliRunner()
        
        with patch("statsview.cli.serve.StatsWebServer") as server_cls:
            server = server_cls.return_value
            server.get_url.return_value = "http://127.0.0.1:0/stats"
            result = runner.invoke(cli, [
                '--config', str(config_path),
                'serve', '--host', '127.0.0.1', '--port', '0', '--role', 'graph',
                '-s', 'num_queries',
            ])
        
        assert result.exit_code == 0, result.output
        kwargs = server_cls.call_args.kwargs
        assert kwargs['host'] == '127.0.0.1'
        assert kwargs['port'] == 0
        assert kwargs['role'] == 'graph'
        assert kwargs['local_ip'] == '10.0.0.9'
        assert kwargs['stats_registry'].is_registered('num_queries')
        server.serve_forever.assert_called_once()
        server.stop.assert_called_once()
    
    def test_serve_rejects_bad_stat_name(self, temp_dir):
        runner = CliRunner()
        
        with patch("statsview.cli.serve.StatsWebServer") as server_cls:
            result = runner.invoke(cli, [
                '--config', str(temp_dir / "none.yaml"),
                'serve', '-s', 'bad.name',
            ])
        
        assert result.exit_code == 1
        assert 'Invalid stat name' in result.output
        server_cls.assert_not_called()
    
    def test_serve_reports_bind_failure(self, temp_dir):
        runner = CliRunner()
        
        with patch("statsview.cli.serve.StatsWebServer") as server_cls:
            server_cls.return_value.start.side_effect = OSError("Address already in use")
            result = runner.invoke(cli, ['--config', str(temp_dir / "none.yaml"), 'serve'])
        
        assert result.exit_code == 1
        assert 'Address already in use' in result.output
