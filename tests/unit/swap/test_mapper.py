"""Unit tests for ArtifactMapper."""

import pytest
from unittest.mock import Mock

from jarswap.core import RealFileSystemService
from jarswap.core.protocols import Logger
from jarswap.exceptions import NoMatchingArtifactError
from jarswap.swap.mapper import ArtifactMapper, CompiledArtifactSet


@pytest.fixture
def package_root(tmp_path):
    root = tmp_path / 'classes'
    for name in [
        'a/B.class',
        'a/B$Inner.class',
        'a/B$Inner$Deeper.class',
        'a/B$1.class',
        'a/BTest.class',
        'a/C.class',
        'a/b/B.class',
        'Top.class',
    ]:
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(name.encode())
    return root


@pytest.fixture
def mapper(package_root):
    return ArtifactMapper(package_root, RealFileSystemService(), Mock(spec=Logger))


class TestArtifactMapper:

    def test_primary_and_nested_classes(self, mapper):
        result = mapper.resolve('a/B.java')

        assert result == CompiledArtifactSet(
            source='a/B.java',
            artifacts=('a/B$1.class', 'a/B$Inner$Deeper.class', 'a/B$Inner.class', 'a/B.class')
        )

    def test_exact_set_for_primary_plus_inner(self, tmp_path):
        root = tmp_path / 'r'
        (root / 'a').mkdir(parents=True)
        (root / 'a' / 'B.class').write_bytes(b'')
        (root / 'a' / 'B$Inner.class').write_bytes(b'')
        mapper = ArtifactMapper(root, RealFileSystemService(), Mock(spec=Logger))

        assert set(mapper.resolve('a/B.java').artifacts) == {'a/B.class', 'a/B$Inner.class'}

    def test_sibling_with_shared_prefix_is_not_selected(self, mapper):
        assert 'a/BTest.class' not in mapper.resolve('a/B.java').artifacts

    def test_other_package_is_not_selected(self, mapper):
        assert mapper.resolve('a/b/B.java').artifacts == ('a/b/B.class',)

    def test_default_package(self, mapper):
        assert mapper.resolve('Top.java').artifacts == ('Top.class',)

    @pytest.mark.parametrize("identifier", [
        'a/B.kt',
        'a/B.javax',
        'a/B.class',
        'README.md',
        '.java',
        '',
        '   ',
    ])
    def test_non_source_identifiers_are_skipped(self, mapper, identifier):
        assert list(mapper.map([identifier])) == []

    def test_missing_class_raises(self, mapper):
        with pytest.raises(NoMatchingArtifactError) as exc_info:
            mapper.resolve('a/Missing.java')

        assert exc_info.value.source == 'a/Missing.java'
        assert exc_info.value.pattern == 'a/Missing.class'

    def test_missing_directory_raises(self, mapper):
        with pytest.raises(NoMatchingArtifactError):
            mapper.resolve('no/such/Pkg.java')

    def test_map_strips_newlines_and_echoes_accepted(self, package_root):
        logger = Mock(spec=Logger)
        mapper = ArtifactMapper(package_root, RealFileSystemService(), logger)

        results = list(mapper.map(['a/C.java\n', 'notes.txt\n', 'Top.java\n']))

        assert [r.source for r in results] == ['a/C.java', 'Top.java']
        logger.progress.assert_any_call('  a/C.java')
        logger.progress.assert_any_call('  Top.java')
        assert logger.progress.call_count == 2
        logger.info.assert_not_called()

    def test_map_is_lazy(self, mapper):
        """Nothing is consumed from the input until results are pulled."""
        consumed = []

        def lines():
            for line in ['a/C.java', 'a/Missing.java']:
                consumed.append(line)
                yield line

        results = mapper.map(lines())
        assert consumed == []

        assert next(results).source == 'a/C.java'
        assert consumed == ['a/C.java']

        with pytest.raises(NoMatchingArtifactError):
            next(results)

    def test_custom_extensions(self, tmp_path):
        root = tmp_path / 'r'
        (root / 'x').mkdir(parents=True)
        (root / 'x' / 'Mod.beam').write_bytes(b'')
        mapper = ArtifactMapper(root, RealFileSystemService(), Mock(spec=Logger),
                                source_extension='.erl', artifact_extension='.beam')

        assert mapper.resolve('x/Mod.erl').artifacts == ('x/Mod.beam',)
