"""Tests for the CLI entry point."""

import logging

import pytest

from cli import commands, repl
from cli.commands import CommandFailed
from cli.main import _pop_option, main, run_once
from cli.models import DeleteCommand, InfoCommand, UploadCommand
from cli.parser import ParseError


@pytest.fixture
def quiet_logging(monkeypatch):
    """Keep main() from reconfiguring the real 'uploader' logger."""
    monkeypatch.setattr('cli.main.setup_logging', lambda name, log_level=None: logging.getLogger(f'test.{name}'))


@pytest.fixture
def global_config(temp_config, monkeypatch):
    monkeypatch.setattr('cli.commands._config', temp_config)
    return temp_config


def test_pop_option_forms():
    args = ['--config', 'a.json', 'config']
    assert _pop_option(args, '--config') == 'a.json'
    assert args == ['config']

    args = ['config', '--config=b.json']
    assert _pop_option(args, '--config') == 'b.json'
    assert args == ['config']

    assert _pop_option(['config'], '--config') is None

    with pytest.raises(ParseError):
        _pop_option(['--config'], '--config')


def test_run_once_success(global_config, capsys):
    assert run_once(['set-key', 'abc123']) == 0

    assert 'API key saved' in capsys.readouterr().out
    assert global_config.get_api_key() == 'abc123'


def test_run_once_failure_exit_code(global_config, tmp_path, capsys):
    code = run_once(['upload', str(tmp_path / 'missing.mp4'), 'Week 1'])

    assert code == 1
    assert 'File not found' in capsys.readouterr().out


def test_run_once_exit_code_ignores_message_wording(monkeypatch, capsys):
    def failing(cmd):
        raise CommandFailed('Nothing to delete today')

    monkeypatch.setitem(repl.HANDLERS, DeleteCommand, failing)
    monkeypatch.setitem(repl.HANDLERS, InfoCommand, lambda cmd: 'Error rate: 0.1%')

    assert run_once(['delete', 'vid-1']) == 1
    assert run_once(['info', 'vid-1']) == 0
    out = capsys.readouterr().out
    assert 'Nothing to delete today' in out
    assert 'Error rate: 0.1%' in out


def test_run_once_parse_error(capsys):
    assert run_once(['frobnicate']) == 2
    assert 'Unknown command' in capsys.readouterr().err


def test_run_once_help(capsys):
    assert run_once(['help']) == 0
    assert 'Available commands' in capsys.readouterr().out


def test_run_once_keeps_quoted_arguments(global_config, monkeypatch):
    seen = []
    monkeypatch.setitem(repl.HANDLERS, UploadCommand, lambda cmd: seen.append(cmd) or 'ok')

    assert run_once(['upload', 'week 1.mp4', 'Week 1 - Intro', '--', 'physics']) == 0
    assert seen[0].file_path == 'week 1.mp4'
    assert seen[0].title == 'Week 1 - Intro'
    assert seen[0].tags == ('physics',)


def test_main_one_shot_with_config_file(quiet_logging, tmp_path, monkeypatch, capsys):
    monkeypatch.setattr('cli.commands._config', None)
    config_path = tmp_path / 'custom.json'

    with pytest.raises(SystemExit) as exc_info:
        main(['--debug', '--config', str(config_path), 'set-key', 'from-cli'])

    assert exc_info.value.code == 0
    assert commands.get_config().config_path == config_path
    assert commands.get_config().get_api_key() == 'from-cli'
    assert str(config_path) in capsys.readouterr().out
