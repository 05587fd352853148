"""Tests for NullEmitter implementation."""

from typing import Any

import pytest

from asyncguard.events import BaseEmitter, NullEmitter


@pytest.fixture
def null_emitter():
    """Provide a NullEmitter instance for testing."""
    return NullEmitter()


class TestNullEmitter:
    """Test NullEmitter implementation."""

    def test_null_emitter_implements_base_emitter(self, null_emitter):
        """Test that NullEmitter inherits from BaseEmitter."""
        assert isinstance(null_emitter, BaseEmitter)

    @pytest.mark.asyncio
    async def test_all_methods_do_nothing_without_error(self, null_emitter):
        """Test that all emitter methods can be called without errors."""
        calls = []

        def handler(event: Any) -> None:
            calls.append(event)

        null_emitter.on("task.started", handler)
        await null_emitter.emit("task.started", {"data": "test"})
        null_emitter.off("task.started", handler)

        assert calls == []

    def test_never_reports_listeners(self, null_emitter):
        null_emitter.on("task.failed", print)

        assert null_emitter.has_listeners("task.failed") is False
