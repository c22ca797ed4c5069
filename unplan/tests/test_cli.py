"""Tests for CLI"""

import json

import pytest

from unplan.cli.main import create_parser, main
from unplan.core.loader import load_registry


REGISTRY_YAML = """
application: Example SDK
components:
  - name: base
    display_name: Base Runtime
  - name: gui
    dependencies: base, api
  - name: api
    virtual: true
  - name: docs
    auto_dependencies: [base]
  - name: cli
  - name: cli2
    installed: false
    replaces: cli
"""


@pytest.fixture
def registry_file(tmp_path):
    path = tmp_path / 'components.yaml'
    path.write_text(REGISTRY_YAML)
    return path


def run(registry_file, *argv):
    return main(['--nocolor', '--registry', str(registry_file)] + list(argv))


class TestParser:
    """Tests for argument parser."""

    def test_version_flag(self):
        parser = create_parser()
        with pytest.raises(SystemExit):
            parser.parse_args(['--version'])

    def test_plan_command(self):
        parser = create_parser()
        args = parser.parse_args(['plan', 'a', 'b', '--apply', '-y'])
        assert args.command == 'plan'
        assert args.components == ['a', 'b']
        assert args.apply is True
        assert args.auto is True

    def test_plan_alias(self):
        parser = create_parser()
        args = parser.parse_args(['p', 'a', '--replace', 'x', '--replace', 'y'])
        assert args.command == 'p'
        assert args.replace == ['x', 'y']

    def test_list_alias(self):
        parser = create_parser()
        args = parser.parse_args(['l', '--all', '--flat'])
        assert args.command == 'l'
        assert args.all is True
        assert args.flat is True

    def test_rdepends(self):
        parser = create_parser()
        args = parser.parse_args(['--registry', 'r.xml', 'rd', 'base', '--json'])
        assert args.component == 'base'
        assert args.registry == 'r.xml'
        assert args.json is True


class TestCommands:
    """Tests for command execution against a registry file."""

    def test_no_command(self, registry_file, capsys):
        assert run(registry_file) == 1

    def test_list_flat(self, registry_file, capsys):
        assert run(registry_file, 'list', '--flat') == 0
        out = capsys.readouterr().out.split()
        assert out == ['api', 'base', 'cli', 'docs', 'gui']

    def test_list_all_json(self, registry_file, capsys):
        assert run(registry_file, 'list', '--all', '--json') == 0
        data = json.loads(capsys.readouterr().out)
        assert len(data) == 6
        assert {'name': 'cli2', 'title': 'cli2', 'version': '', 'installed': False,
                'virtual': False, 'forced_installation': False} in data
        assert {'name': 'base', 'title': 'Base Runtime', 'version': '', 'installed': True,
                'virtual': False, 'forced_installation': False} in data

    def test_rdepends_json(self, registry_file, capsys):
        assert run(registry_file, 'rdepends', 'api', '--json') == 0
        data = json.loads(capsys.readouterr().out)
        assert data == {'name': 'api', 'dependees': ['gui'], 'install_dependants': ['gui']}

    def test_rdepends_unknown(self, registry_file, capsys):
        assert run(registry_file, 'rdepends', 'nope') == 1
        assert 'Unknown component' in capsys.readouterr().out

    def test_plan_text(self, registry_file, capsys):
        assert run(registry_file, 'plan', 'base') == 0
        out = capsys.readouterr().out

        assert 'The following 4 component(s) will be removed:' in out
        assert 'Deselected Components: (1)' in out
        assert 'Components dependency "base" removed: (1)' in out
        assert 'Components autodependency "base" removed: (1)' in out
        assert 'Removing virtual components without existing dependencies: (1)' in out
        assert out.index('Deselected') < out.index('dependency "base"')

    def test_plan_json(self, registry_file, capsys):
        assert run(registry_file, 'plan', 'base', '--json') == 0
        data = json.loads(capsys.readouterr().out)

        assert data['count'] == 4
        by_name = {c['name']: c for c in data['components']}
        assert by_name['base']['reason'] == 'selected'
        assert by_name['gui']['reason'] == 'dependent'
        assert by_name['gui']['referenced'] == 'base'
        assert by_name['docs']['reason'] == 'auto-dependent'
        assert by_name['docs']['install_action'] == 'autodepend-uninstallation'
        assert by_name['api']['reason'] == 'virtual-dependent'

    def test_plan_replace(self, registry_file, capsys):
        assert run(registry_file, 'plan', '--replace', 'cli2', '--json') == 0
        data = json.loads(capsys.readouterr().out)
        assert [(c['name'], c['reason'], c['referenced']) for c in data['components']] == \
            [('cli', 'replaced', 'cli2')]

    def test_plan_nothing_given(self, registry_file, capsys):
        assert run(registry_file, 'plan') == 1
        assert 'no components specified' in capsys.readouterr().out

    def test_plan_unknown(self, registry_file, capsys):
        assert run(registry_file, 'plan', 'nope') == 1
        assert 'Error: Unknown component(s): nope' in capsys.readouterr().out

    def test_plan_apply(self, registry_file, capsys):
        assert run(registry_file, 'plan', 'gui', '--apply', '-y') == 0
        out = capsys.readouterr().out
        assert '2 component(s) removed' in out

        saved = load_registry(registry_file.with_name('components.xml'))
        assert [c.name for c in saved] == ['base', 'docs', 'cli', 'cli2']
        assert not saved.get('cli2').installed

    def test_plan_apply_declined(self, registry_file, capsys, monkeypatch):
        monkeypatch.setattr('builtins.input', lambda prompt: 'n')
        assert run(registry_file, 'plan', 'gui', '--apply') == 0
        assert 'Aborted.' in capsys.readouterr().out
        assert not registry_file.with_name('components.xml').exists()

    def test_missing_registry(self, tmp_path, capsys):
        assert main(['--registry', str(tmp_path / 'nope.xml'), 'list']) == 1
        assert 'Registry not found' in capsys.readouterr().out


class TestDisplay:
    """Tests for component list formatting."""

    def test_columns_truncated(self):
        from unplan.cli.display import DisplayMode, format_component_list

        lines = format_component_list(
            ['aa', 'bb', 'cc', 'dd', 'ee'], max_lines=1, show_all=False,
            mode=DisplayMode.COLUMNS, terminal_width=10)
        assert lines == ['  aa  bb', '  ... and 3 more']

    def test_columns_show_all(self):
        from unplan.cli.display import DisplayMode, format_component_list

        lines = format_component_list(
            ['aa', 'bb', 'cc'], max_lines=1, show_all=True,
            mode=DisplayMode.COLUMNS, terminal_width=10)
        assert lines == ['  aa  bb', '  cc']

    def test_json_and_flat(self):
        from unplan.cli.display import DisplayMode, format_component_list

        assert format_component_list(['a', 'b'], mode=DisplayMode.JSON) == ['["a", "b"]']
        assert format_component_list(['a', 'b'], mode=DisplayMode.FLAT) == ['a', 'b']
        assert format_component_list([], mode=DisplayMode.FLAT) == []
