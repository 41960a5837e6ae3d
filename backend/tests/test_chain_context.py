import pytest

from hoskdog.chain import context as context_module


@pytest.fixture(autouse=True)
def clear_contexts():
    context_module.reset_contexts()
    yield
    context_module.reset_contexts()


def test_missing_project_id_raises():
    with pytest.raises(context_module.ChainNotConfigured):
        context_module.get_context(None)


def test_contexts_are_cached_per_project(monkeypatch):
    built = []

    def fake_build(project_id):
        built.append(project_id)
        return object()

    monkeypatch.setattr(context_module, "_build_context", fake_build)

    first = context_module.get_context("mainnetkey")
    assert context_module.get_context("mainnetkey") is first
    assert built == ["mainnetkey"]

    context_module.reset_contexts()
    context_module.get_context("mainnetkey")
    assert built == ["mainnetkey", "mainnetkey"]
