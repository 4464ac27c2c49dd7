"""
Tests for application startup/shutdown and timestamp conventions.
"""

import pytest


class TestLifespan:
    """The app uses a lifespan context manager, not the deprecated on_event hooks."""

    def test_main_does_not_use_on_event(self):
        import inspect
        from lawdesk import main
        source = inspect.getsource(main)

        assert "@app.on_event" not in source

    def test_app_has_lifespan(self):
        from lawdesk.main import app

        assert app.router.lifespan_context is not None

    async def test_lifespan_creates_and_clears_session_store(self, monkeypatch, tmp_path):
        from lawdesk import main
        from lawdesk.config import settings
        from lawdesk.sessions import MemorySessionStore

        calls = []

        async def fake_init_db():
            calls.append("init")

        async def fake_close_db():
            calls.append("close")

        monkeypatch.setattr(main, "init_db", fake_init_db)
        monkeypatch.setattr(main, "close_db", fake_close_db)
        monkeypatch.setattr(settings, "UPLOAD_DIR", tmp_path / "fresh-uploads")

        async with main.lifespan(main.app):
            store = main.app.state.session_store
            assert isinstance(store, MemorySessionStore)
            assert (tmp_path / "fresh-uploads").is_dir()
            session_id = await store.create("user-1")

        assert calls == ["init", "close"]
        assert await store.get(session_id) is None


class TestNoUtcnow:
    """Source code should not use deprecated datetime.utcnow()."""

    def test_source_files_do_not_use_utcnow(self):
        from pathlib import Path

        package_dir = Path(__file__).parent.parent / "lawdesk"
        violations = []

        for py_file in package_dir.rglob("*.py"):
            for i, line in enumerate(py_file.read_text(encoding="utf-8").splitlines(), 1):
                if line.lstrip().startswith("#"):
                    continue
                if "utcnow()" in line:
                    violations.append(f"{py_file.name}:{i}: {line.strip()}")

        assert violations == []
