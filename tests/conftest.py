"""Shared fixtures: tiny jars built with zipfile."""

import zipfile
from pathlib import Path

import pytest


def write_jar(path, entries):
    """Write a jar at path with {relative_name: bytes} entries."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(path, 'w', compression=zipfile.ZIP_DEFLATED) as zf:
        for name, data in entries.items():
            zf.writestr(name, data)
    return path


def read_jar(path):
    """Return {relative_name: bytes} for every file entry of a jar."""
    with zipfile.ZipFile(path) as zf:
        return {
            info.filename: zf.read(info.filename)
            for info in zf.infolist()
            if not info.is_dir()
        }


@pytest.fixture
def jar_factory():
    return write_jar


@pytest.fixture
def jar_reader():
    return read_jar


@pytest.fixture
def build_jar(tmp_path):
    """Freshly compiled build of app.jar."""
    return write_jar(tmp_path / 'build' / 'app.jar', {
        'META-INF/MANIFEST.MF': b'Manifest-Version: 1.0\n',
        'pkg/Foo.class': b'new Foo',
        'pkg/Foo$Inner.class': b'new Foo$Inner',
        'pkg/FooBar.class': b'new FooBar',
        'pkg/Bar.class': b'new Bar',
        'pkg/sub/Baz.class': b'new Baz',
    })


@pytest.fixture
def deployed_jar(tmp_path):
    """Deployed (older) app.jar in its own directory."""
    return write_jar(tmp_path / 'deploy' / 'app.jar', {
        'META-INF/MANIFEST.MF': b'Manifest-Version: 1.0\n',
        'pkg/Foo.class': b'old Foo',
        'pkg/Bar.class': b'old Bar',
        'pkg/sub/Baz.class': b'old Baz',
    })
