import pytest

from topocoords.utils.conditional_imports import ConditionalPackageInterceptor


@pytest.fixture
def interceptor(monkeypatch):
    monkeypatch.setattr(ConditionalPackageInterceptor, 'PERMITTED_PACKAGES', {})
    monkeypatch.setattr(ConditionalPackageInterceptor, 'AUTO_DOWNLOAD', False)
    return ConditionalPackageInterceptor


def test_permit_packages(interceptor):
    interceptor.permit_packages(['foo'])
    assert interceptor.PERMITTED_PACKAGES == {'foo': 'foo'}

    interceptor.permit_packages({'bar': 'topocoords[bar]'})
    assert interceptor.PERMITTED_PACKAGES == {'foo': 'foo', 'bar': 'topocoords[bar]'}

    with pytest.raises(TypeError):
        interceptor.permit_packages('baz')


def test_permit_auto_download(interceptor):
    interceptor.permit_auto_download(True)
    assert interceptor.AUTO_DOWNLOAD


def test_find_spec(interceptor):
    assert interceptor.find_spec('not_permitted', None) is None

    interceptor.permit_packages({'bar': 'topocoords[bar]'})
    with pytest.raises(ModuleNotFoundError) as exc:
        interceptor.find_spec('bar', None)

    assert exc.value.name == 'bar'
    assert 'pip install topocoords[bar]' in str(exc.value)


def test_registered_on_import():
    import sys
    import topocoords  # noqa: F401

    assert ConditionalPackageInterceptor in sys.meta_path
    assert ConditionalPackageInterceptor.PERMITTED_PACKAGES.get('sgp4') == 'topocoords[sgp4]'
