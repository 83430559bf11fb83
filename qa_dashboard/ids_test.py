"""Unit tests for the id allocation module."""

from __future__ import annotations

import pytest

from qa_dashboard.errors import DuplicateIdConflict
from qa_dashboard.ids import IdAllocator, next_available_id


class TestNextAvailableId:
    """Tests for next_available_id()."""

    def test_empty_store_uses_floor(self):
        assert next_available_id(None) == 1000

    def test_above_max(self):
        assert next_available_id(1041) == 1042

    def test_never_below_floor(self):
        assert next_available_id(3) == 1000
        assert next_available_id(999) == 1000

    def test_custom_floor(self):
        assert next_available_id(None, floor=1) == 1
        assert next_available_id(10, floor=1) == 11


class TestIdAllocator:
    """Tests for IdAllocator."""

    def test_sequential(self):
        ids = IdAllocator(1000)
        assert [ids.allocate() for _ in range(3)] == [1000, 1001, 1002]

    def test_start_clamped_to_floor(self):
        assert IdAllocator(start=5).allocate() == 1000

    def test_conflict_raises_without_advancing(self):
        ids = IdAllocator(1000)
        with pytest.raises(DuplicateIdConflict) as exc_info:
            ids.allocate(is_taken=lambda candidate: candidate == 1000)
        assert exc_info.value.conflicting_id == 1000
        assert ids.peek == 1000

    def test_rederive_moves_past_max(self):
        ids = IdAllocator(1000)
        assert ids.rederive(1500) == 1501
        assert ids.allocate() == 1501

    def test_rederive_never_moves_backwards(self):
        ids = IdAllocator(2000)
        assert ids.rederive(1500) == 2000
        assert ids.rederive(None) == 2000

    def test_conflict_then_rederive_recovers(self):
        taken = {1000, 1001, 1002}
        ids = IdAllocator(1000)
        with pytest.raises(DuplicateIdConflict):
            ids.allocate(taken.__contains__)
        ids.rederive(max(taken))
        assert ids.allocate(taken.__contains__) == 1003
