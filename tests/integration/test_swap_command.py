"""Integration tests for the swap and apply commands.

Local-mode runs go through the real filesystem end to end. Remote-mode runs
replace scp/ssh with an in-process emulation that copies files and runs the
`apply` command, so the whole request/CLI round trip is exercised.
"""

import argparse
import io
import shlex
import shutil
from pathlib import Path
from unittest.mock import patch, MagicMock

import pytest

import jarswap
from jarswap.commands import swap, apply


@pytest.fixture(autouse=True)
def no_user_config(tmp_path, monkeypatch):
    monkeypatch.delenv('JARSWAP_CONFIG', raising=False)
    monkeypatch.setattr('jarswap.utils.config.USER_CONFIG_PATH', str(tmp_path / 'nohome' / '.jarswap.yaml'))


def swap_args(jar, target, restore=False, verbose=False, config=None):
    return argparse.Namespace(
        jar=str(jar),
        target=str(target),
        restore=restore,
        verbose=verbose,
        config=config
    )


def run_swap(jar, target, sources=(), **kwargs):
    stdin = io.StringIO(''.join(f"{s}\n" for s in sources))
    return swap.execute(swap_args(jar, target, **kwargs), stdin=stdin)


class TestSwapParser:

    def test_setup_parser_configures_all_arguments(self):
        parser = argparse.ArgumentParser()
        swap.setup_parser(parser)

        args = parser.parse_args(['app.jar', '/opt/lib'])

        assert args.jar == 'app.jar'
        assert args.target == '/opt/lib'
        assert args.restore is False
        assert args.verbose is False
        assert args.config is None

    def test_parser_accepts_all_arguments(self):
        parser = argparse.ArgumentParser()
        swap.setup_parser(parser)

        args = parser.parse_args(['app.jar', 'u@h:/opt', '--restore', '--verbose', '--config', 'c.yaml'])

        assert args.restore is True
        assert args.verbose is True
        assert args.config == 'c.yaml'


class TestLocalSwap:
    """Patch/restore scenarios against a local destination directory."""

    def test_patch_then_restore(self, build_jar, deployed_jar, jar_reader, capsys):
        original = deployed_jar.read_bytes()

        assert run_swap(build_jar, deployed_jar.parent, ['pkg/Foo.java']) == 0

        entries = jar_reader(deployed_jar)
        assert entries['pkg/Foo.class'] == b'new Foo'
        assert entries['pkg/Foo$Inner.class'] == b'new Foo$Inner'
        assert entries['pkg/Bar.class'] == b'old Bar'
        assert 'pkg/FooBar.class' not in entries
        assert capsys.readouterr().out.strip().splitlines()[-1] == '[SUCCESS]'

        assert run_swap(build_jar, deployed_jar.parent, restore=True) == 0

        assert deployed_jar.read_bytes() == original
        assert not (deployed_jar.parent / '.jar-swap').exists()
        assert capsys.readouterr().out.strip().splitlines()[-1] == '[SUCCESS]'

    def test_repeated_patches_are_not_incremental(self, build_jar, deployed_jar, jar_reader):
        original = deployed_jar.read_bytes()
        backup = deployed_jar.parent / '.jar-swap' / 'app.orig.jar'

        assert run_swap(build_jar, deployed_jar.parent, ['pkg/Foo.java']) == 0
        backup_after_first = backup.read_bytes()
        first = deployed_jar.read_bytes()

        assert run_swap(build_jar, deployed_jar.parent, ['pkg/Bar.java']) == 0

        assert backup.read_bytes() == backup_after_first == original
        assert deployed_jar.read_bytes() != first
        entries = jar_reader(deployed_jar)
        assert entries['pkg/Foo.class'] == b'old Foo'
        assert entries['pkg/Bar.class'] == b'new Bar'

    def test_restore_without_patch(self, build_jar, deployed_jar, capsys):
        before = sorted(p.name for p in deployed_jar.parent.iterdir())
        original = deployed_jar.read_bytes()

        assert run_swap(build_jar, deployed_jar.parent, restore=True) == 0

        out = capsys.readouterr().out
        assert "Nothing to restore." in out
        assert out.strip().splitlines()[-1] == '[SUCCESS]'
        assert sorted(p.name for p in deployed_jar.parent.iterdir()) == before
        assert deployed_jar.read_bytes() == original

    def test_missing_class_fails_without_touching_destination(self, build_jar, deployed_jar, capsys):
        original = deployed_jar.read_bytes()

        assert run_swap(build_jar, deployed_jar.parent, ['pkg/Foo.java', 'pkg/Nope.java']) == 1

        assert deployed_jar.read_bytes() == original
        assert not (deployed_jar.parent / '.jar-swap').exists()
        assert not (deployed_jar.parent / 'app.swap.zip').exists()
        captured = capsys.readouterr()
        assert captured.out.strip().splitlines()[-1] == '[FAILED]'
        assert 'pkg/Nope.class' in captured.err

    def test_selected_sources_are_listed_on_stderr(self, build_jar, deployed_jar, capsys):
        assert run_swap(build_jar, deployed_jar.parent, ['pkg/Foo.java']) == 0

        captured = capsys.readouterr()
        assert "Packing for swap the classes corresponding to the following source files:" in captured.err
        assert "  pkg/Foo.java\n" in captured.err
        assert "pkg/Foo.java" not in captured.out
        assert captured.out.strip().splitlines() == ['[SUCCESS]']

    def test_missing_class_is_reported_once(self, build_jar, deployed_jar, capsys):
        assert run_swap(build_jar, deployed_jar.parent, ['pkg/Nope.java']) == 1

        assert capsys.readouterr().err.count('pkg/Nope.class') == 1

    def test_nothing_to_swap_still_succeeds(self, build_jar, deployed_jar, jar_reader, capsys):
        before = jar_reader(deployed_jar)

        assert run_swap(build_jar, deployed_jar.parent, ['docs/readme.txt']) == 0

        assert "No .class file to swap." in capsys.readouterr().out
        assert jar_reader(deployed_jar) == before

    def test_missing_target_dir_fails(self, build_jar, tmp_path, capsys):
        assert run_swap(build_jar, tmp_path / 'nowhere', ['pkg/Foo.java']) == 1

        assert capsys.readouterr().out.strip().splitlines()[-1] == '[FAILED]'

    def test_verbose_echoes_derived_values(self, build_jar, deployed_jar, capsys):
        assert run_swap(build_jar, deployed_jar.parent, ['pkg/Foo.java'], verbose=True) == 0

        out = capsys.readouterr().out
        assert "Debug: jarName" in out
        assert "app.jar" in out
        assert "Debug: targetBackupName" in out
        assert "app.orig.jar" in out

    def test_config_changes_staging_dir(self, build_jar, deployed_jar, tmp_path):
        config = tmp_path / 'c.yaml'
        config.write_text("remote_working_dir: .patches\nlocal_working_dir: .prep\n")

        assert run_swap(build_jar, deployed_jar.parent, ['pkg/Foo.java'], config=str(config)) == 0

        assert (deployed_jar.parent / '.patches' / 'app.orig.jar').is_file()
        assert (build_jar.parent / '.prep' / 'app.swap.zip').is_file()

    def test_bad_config_fails(self, build_jar, deployed_jar, tmp_path, capsys):
        config = tmp_path / 'c.yaml'
        config.write_text("nonsense: 1\n")

        assert run_swap(build_jar, deployed_jar.parent, ['pkg/Foo.java'], config=str(config)) == 1

        assert capsys.readouterr().out.strip().splitlines()[-1] == '[FAILED]'


class TestDestinationErrors:

    @pytest.mark.parametrize("target, message", [
        ("deploy@app01:", "[ERROR] missing target path"),
        ("deploy@:/opt/lib", "[ERROR] missing host name"),
    ])
    def test_bad_target_prints_usage(self, build_jar, target, message, capsys):
        usage = MagicMock()
        args = swap_args(build_jar, target)
        args.print_usage = usage

        assert swap.execute(args, stdin=io.StringIO()) == 1

        out = capsys.readouterr().out
        assert message in out
        assert out.strip().splitlines()[-1] == '[FAILED]'
        usage.assert_called_once()


class FakeRemote:
    """Stands in for scp/ssh: the "remote" filesystem is the local one."""

    def __init__(self):
        self.commands = []

    def __call__(self, cmd, **kwargs):
        self.commands.append(cmd)
        if cmd[0] == 'scp':
            local, remote = cmd[-2], cmd[-1]
            remote_dir = remote.split(':', 1)[1]
            shutil.copy(local, Path(remote_dir) / Path(local).name)
            return MagicMock(returncode=0, stdout='', stderr='')
        if cmd[0] == 'ssh':
            argv = shlex.split(cmd[-1])[1:]
            try:
                jarswap.main(argv)
            except SystemExit as e:
                return MagicMock(returncode=e.code, stdout='', stderr='')
        raise AssertionError(f"unexpected command {cmd}")


class TestRemoteSwap:

    def test_patch_and_restore_over_ssh(self, build_jar, deployed_jar, jar_reader, capsys):
        original = deployed_jar.read_bytes()
        remote = FakeRemote()
        target = f"deploy@app01:{deployed_jar.parent}"

        with patch('jarswap.core.implementations.subprocess.run', side_effect=remote):
            assert run_swap(build_jar, target, ['pkg/Foo.java']) == 0
            assert jar_reader(deployed_jar)['pkg/Foo.class'] == b'new Foo'

            assert run_swap(build_jar, target, restore=True) == 0

        assert deployed_jar.read_bytes() == original
        assert [c[0] for c in remote.commands] == ['scp', 'ssh', 'ssh']
        assert remote.commands[0][-1] == f"deploy@app01:{deployed_jar.parent}/"
        assert remote.commands[1][-2] == 'deploy@app01'

    def test_connection_failure(self, build_jar, deployed_jar, capsys):
        original = deployed_jar.read_bytes()

        with patch('jarswap.core.implementations.subprocess.run') as mock_run:
            mock_run.return_value = MagicMock(returncode=255, stdout='', stderr='ssh: connect to host app01: Connection refused')
            assert run_swap(build_jar, f"app01:{deployed_jar.parent}", ['pkg/Foo.java']) == 1

        assert mock_run.call_count == 1
        assert deployed_jar.read_bytes() == original
        assert capsys.readouterr().out.strip().splitlines()[-1] == '[FAILED]'


class TestApplyCommand:

    def _args(self, action, target_dir):
        parser = argparse.ArgumentParser()
        apply.setup_parser(parser)
        return parser.parse_args([action, '--target-dir', str(target_dir), '--archive-name', 'app.jar'])

    def test_defaults(self, tmp_path):
        args = self._args('merge', tmp_path)

        assert args.working_dir_name == '.jar-swap'
        assert args.verbose is False

    def test_merge_without_delivery_exits_nonzero(self, deployed_jar, capsys):
        assert apply.execute(self._args('merge', deployed_jar.parent)) == 1

        assert "No overlay archive" in capsys.readouterr().err

    def test_restore_without_backup_exits_zero(self, deployed_jar, capsys):
        assert apply.execute(self._args('restore', deployed_jar.parent)) == 0

        assert "Nothing to restore." in capsys.readouterr().out


class TestMain:

    def test_no_command_prints_help(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            jarswap.main([])

        assert exc_info.value.code == 1
        assert 'swap' in capsys.readouterr().out

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            jarswap.main(['--version'])

        assert exc_info.value.code == 0
        assert jarswap.__version__ in capsys.readouterr().out

    def test_swap_help_has_examples(self, capsys):
        with pytest.raises(SystemExit):
            jarswap.main(['swap', '--help'])

        out = capsys.readouterr().out
        assert "NOT incremental" in out
        assert "echo 'org/foo/Bar.java'" in out

    def test_swap_dispatch(self, build_jar, deployed_jar, monkeypatch):
        monkeypatch.setattr('sys.stdin', io.StringIO('pkg/Bar.java\n'))

        with pytest.raises(SystemExit) as exc_info:
            jarswap.main(['swap', str(build_jar), str(deployed_jar.parent)])

        assert exc_info.value.code == 0
