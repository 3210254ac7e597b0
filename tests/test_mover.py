"""
Unit tests for the folder mover.
"""

import pytest

from drive_folder_mover.errors import (
    InvalidInputError,
    NotFoundError,
    PermissionDeniedError,
)
from drive_folder_mover.mover import FolderMover
from drive_folder_mover.types import MoveRequest, MoveState, MoveStatus

from fakes import FakeDirectoryClient, shared_tree


def personal_tree() -> FakeDirectoryClient:
    """Same shape as shared_tree, outside any shared drive."""
    client = shared_tree()
    for item in client.items.values():
        item["drive_id"] = None
    return client


def mirror_of(client, name, parent_id):
    matches = [
        item_id for item_id, item in client.items.items()
        if item["name"] == name and parent_id in item["parents"]
    ]
    assert len(matches) == 1, f"expected one '{name}' under {parent_id}: {matches}"
    return matches[0]


class TestDirectMove:
    """Tests for moves outside shared drives."""

    def test_single_reparent_call(self):
        """Exactly one reparent and no tree walk."""
        client = personal_tree()
        outcome = FolderMover(client).move_folder("A", "D")

        assert outcome.status == MoveStatus.DIRECT_MOVE
        assert client.methods().count("reparent") == 1
        assert "list_children" not in client.methods()
        assert client.mutation_calls() == [("reparent", ("A", "D", ("sd-root",)))]
        assert client.parent_of("A") == "D"

    def test_contents_untouched(self):
        """Children keep their ids and parents."""
        client = personal_tree()
        FolderMover(client).move_folder("A", "D")

        assert client.parent_of("B") == "A"
        assert client.parent_of("f-c1") == "C"

    def test_dry_run(self):
        """Dry run reports without reparenting."""
        client = personal_tree()
        outcome = FolderMover(client, dry_run=True).move_folder("A", "D")

        assert outcome.status == MoveStatus.DRY_RUN
        assert client.mutation_calls() == []

    def test_state_ends_done(self):
        client = personal_tree()
        mover = FolderMover(client)
        mover.move_folder("A", "D")
        assert mover.state == MoveState.DONE


class TestTreeMirrorMove:
    """Tests for moves involving shared drives."""

    def test_full_move(self):
        """Every file ends up in a recreated folder and originals are gone."""
        client = shared_tree()
        outcome = FolderMover(client).move_folder("A", "D")

        assert outcome.status == MoveStatus.MOVED
        assert outcome.moved_file_count == 3
        assert outcome.recreated_folder_count == 4
        assert outcome.deleted_folder_count == 4
        assert outcome.skipped_folder_ids == []
        assert outcome.errors == []

        new_a = mirror_of(client, "Alpha", "D")
        new_b = mirror_of(client, "Beta", new_a)
        new_c = mirror_of(client, "Gamma", new_b)
        mirror_of(client, "Epsilon", new_a)
        assert client.parent_of("f-a1") == new_a
        assert client.parent_of("f-b1") == new_b
        assert client.parent_of("f-c1") == new_c
        for original in ("A", "B", "C", "E"):
            assert original not in client.items

    def test_single_file_scenario(self):
        """root(A) -> folder(B) -> file(F1) moved into D."""
        client = FakeDirectoryClient()
        client.add_folder("D", "Dest", drive_id="sd")
        client.add_folder("A", "Alpha", drive_id="sd")
        client.add_folder("B", "Beta", "A", drive_id="sd")
        client.add_file("F1", "f1.txt", "B", drive_id="sd")

        outcome = FolderMover(client).move_folder("A", "D")

        assert outcome.moved_file_count == 1
        assert outcome.recreated_folder_count == 2
        assert outcome.skipped_folder_ids == []
        new_b = mirror_of(client, "Beta", mirror_of(client, "Alpha", "D"))
        assert client.parent_of("F1") == new_b
        assert "A" not in client.items and "B" not in client.items

    def test_shared_destination_triggers_mirror(self):
        """A shared destination alone is enough to mirror."""
        client = personal_tree()
        client.items["D"]["drive_id"] = "sd"

        outcome = FolderMover(client).move_folder("A", "D")

        assert outcome.status == MoveStatus.MOVED
        assert "reparent" not in client.methods()

    def test_forced_tree_mirror(self):
        """Forcing mirrors even outside shared drives."""
        client = personal_tree()

        outcome = FolderMover(client).move_folder("A", "D", force_tree_mirror=True)

        assert outcome.status == MoveStatus.MOVED
        assert "reparent" not in client.methods()

    def test_mirror_failure_keeps_branch(self):
        """Files of a folder that could not be recreated stay and are reported."""
        client = shared_tree()
        client.create_failures["Beta"] = PermissionDeniedError("create Beta: HTTP 403")

        outcome = FolderMover(client).move_folder("A", "D")

        assert outcome.status == MoveStatus.PARTIAL
        assert outcome.moved_file_count == 1
        assert set(outcome.skipped_folder_ids) == {"B", "C"}
        assert any("f-b1" in e for e in outcome.errors)
        assert any("f-c1" in e for e in outcome.errors)
        assert client.parent_of("f-b1") == "B"
        assert client.parent_of("f-c1") == "C"
        # Sibling branch still moved and cleaned up
        assert "E" not in client.items
        assert {"A", "B", "C"} <= set(client.items)

    def test_failed_batch_operation_reported(self):
        """A failing attachment shows up in errors and keeps its folders."""
        client = shared_tree()
        client.failing_targets.add("f-b1")

        outcome = FolderMover(client).move_folder("A", "D")

        assert outcome.status == MoveStatus.PARTIAL
        assert outcome.moved_file_count == 2
        assert any("f-b1" in e for e in outcome.errors)
        assert {"A", "B"} <= set(outcome.skipped_folder_ids)
        assert len(outcome.failed_results) == 1

    def test_empty_folder_nothing_to_move(self):
        """No mutation at all for an empty source."""
        client = FakeDirectoryClient()
        client.add_folder("D", "Dest", drive_id="sd")
        client.add_folder("A", "Alpha", drive_id="sd")

        outcome = FolderMover(client).move_folder("A", "D")

        assert outcome.status == MoveStatus.NOTHING_TO_MOVE
        assert client.mutation_calls() == []

    def test_folders_without_files_nothing_to_move(self):
        """Subfolders alone are not worth recreating."""
        client = shared_tree()
        for file_id in ("f-a1", "f-b1", "f-c1"):
            del client.items[file_id]

        outcome = FolderMover(client).move_folder("A", "D")

        assert outcome.status == MoveStatus.NOTHING_TO_MOVE
        assert client.mutation_calls() == []

    def test_dry_run(self):
        """Dry run counts the plan but mutates nothing."""
        client = shared_tree()
        outcome = FolderMover(client, dry_run=True).move_folder("A", "D")

        assert outcome.status == MoveStatus.DRY_RUN
        assert outcome.moved_file_count == 3
        assert outcome.recreated_folder_count == 4
        assert outcome.deleted_folder_count == 4
        assert client.mutation_calls() == []

    def test_repeated_moves_are_independent(self):
        """A mover instance can perform several unrelated moves."""
        client = shared_tree()
        client.add_folder("X", "Xray", "sd-root", drive_id="sd")
        client.add_file("f-x1", "x1.txt", "X", drive_id="sd")
        mover = FolderMover(client)

        first = mover.move_folder("A", "D")
        second = mover.move_folder("X", "D")

        assert first.moved_file_count == 3
        assert second.moved_file_count == 1
        assert second.recreated_folder_count == 1

    def test_rejected_root_mirror_is_partial(self):
        """No write access at the destination moves nothing and says so."""
        client = shared_tree()
        client.create_failures["Alpha"] = PermissionDeniedError("create Alpha: HTTP 403")

        outcome = FolderMover(client).move_folder("A", "D")

        assert outcome.status == MoveStatus.PARTIAL
        assert outcome.moved_file_count == 0
        assert outcome.recreated_folder_count == 0
        assert "A" in outcome.skipped_folder_ids
        for file_id in ("f-a1", "f-b1", "f-c1"):
            assert any(file_id in e for e in outcome.errors)
        assert "submit_batch" not in client.methods()
        assert {"A", "B", "C", "E"} <= set(client.items)


class TestMoveErrors:
    """Tests for aborted moves."""

    def test_missing_ids(self):
        with pytest.raises(InvalidInputError):
            FolderMover(shared_tree()).move_folder("", "D")
        with pytest.raises(InvalidInputError):
            FolderMover(shared_tree()).move_folder("A", None)

    def test_same_source_and_destination(self):
        with pytest.raises(InvalidInputError):
            FolderMover(shared_tree()).move_folder("A", "A")

    def test_destination_inside_source(self):
        """Moving a folder under its own descendant is refused before any change."""
        client = shared_tree()
        mover = FolderMover(client)

        with pytest.raises(InvalidInputError):
            mover.move_folder("A", "C")

        assert client.mutation_calls() == []
        assert mover.state == MoveState.FAILED
        assert client.parent_of("f-c1") == "C"

    def test_unknown_source_fails(self):
        """Lookup failures abort and leave the mover in FAILED."""
        mover = FolderMover(shared_tree())

        with pytest.raises(NotFoundError):
            mover.move_folder("missing", "D")

        assert mover.state == MoveState.FAILED


class TestMoveAll:
    """Tests for processing move lists."""

    def test_continues_after_failure(self):
        """A failing request becomes a FAILED outcome."""
        client = shared_tree()
        mover = FolderMover(client)

        outcomes = mover.move_all([
            MoveRequest("missing", "D"),
            MoveRequest("A", "D"),
        ])

        assert [o.status for o in outcomes] == [MoveStatus.FAILED, MoveStatus.MOVED]
        assert "NotFoundError" in outcomes[0].errors[0]

    def test_max_moves(self):
        """Only the first max_moves requests are processed."""
        client = shared_tree()
        mover = FolderMover(client, max_moves=1)

        outcomes = mover.move_all([MoveRequest("A", "D"), MoveRequest("E", "D")])

        assert len(outcomes) == 1

    def test_progress_callback(self):
        calls = []
        mover = FolderMover(shared_tree())

        mover.move_all(
            [MoveRequest("A", "D")],
            progress_callback=lambda current, total, request: calls.append((current, total)),
        )

        assert calls == [(1, 1)]

    def test_stats_and_summary(self):
        mover = FolderMover(shared_tree())
        mover.move_all([MoveRequest("A", "D"), MoveRequest("missing", "D")])

        stats = mover.get_stats()
        assert stats["moved"] == 1
        assert stats["failed"] == 1

        summary = mover.get_summary()
        assert "Moved by tree mirror: 1" in summary
        assert "Failed: 1" in summary

        mover.reset_stats()
        assert sum(mover.get_stats().values()) == 0
