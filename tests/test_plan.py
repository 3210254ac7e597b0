"""
Unit tests for the move plan builder.
"""

from drive_folder_mover.plan import build_plan, count_eligible_files, internal_folder_ids
from drive_folder_mover.types import (
    ChildItem,
    FolderTreeEntry,
    MirrorFolder,
    MoveOperation,
    OperationKind,
)


def folder(item_id, parent):
    return ChildItem(id=item_id, name=item_id, parents=[parent], is_folder=True)


def file(item_id, parent):
    return ChildItem(id=item_id, name=f"{item_id}.txt", parents=[parent])


def simple_tree():
    """root A -> folder B -> file F1"""
    return [
        FolderTreeEntry(["A"], ["Alpha"], [folder("B", "A")]),
        FolderTreeEntry(["A", "B"], ["Alpha", "Beta"], [file("F1", "B")]),
    ]


def wide_tree():
    """A holds fa, B holds fb, C (under B) holds fc, E holds fe"""
    return [
        FolderTreeEntry(["A"], ["Alpha"], [file("fa", "A"), folder("B", "A"), folder("E", "A")]),
        FolderTreeEntry(["A", "B"], ["Alpha", "Beta"], [file("fb", "B"), folder("C", "B")]),
        FolderTreeEntry(["A", "B", "C"], ["Alpha", "Beta", "Gamma"], [file("fc", "C")]),
        FolderTreeEntry(["A", "E"], ["Alpha", "Epsilon"], [file("fe", "E")]),
    ]


def mirrors(*ids):
    return {source_id: MirrorFolder(new_id=f"new-{source_id}", name=source_id) for source_id in ids}


class TestBuildPlan:
    """Tests for build_plan function."""

    def test_single_file_scenario(self):
        """F1 is attached to B's mirror, then B and A are deleted."""
        plan = build_plan(simple_tree(), mirrors("A", "B"))

        assert plan.operations == [
            MoveOperation(OperationKind.ATTACH, "F1", parent_id="new-B", previous_parent_id="B"),
            MoveOperation(OperationKind.DELETE, "B"),
            MoveOperation(OperationKind.DELETE, "A"),
        ]
        assert plan.diagnostics == []
        assert plan.skipped_folder_ids == []

    def test_folder_children_never_attached(self):
        """Children that are subtree folders are excluded from attachment."""
        entries = wide_tree()
        plan = build_plan(entries, mirrors("A", "B", "C", "E"))
        internal = internal_folder_ids(entries)

        attached = {op.target_id for op in plan.attach_operations}
        assert attached == {"fa", "fb", "fc", "fe"}
        assert not attached & internal

    def test_attaches_precede_deletes(self):
        """No DELETE appears before an ATTACH."""
        plan = build_plan(wide_tree(), mirrors("A", "B", "C", "E"))
        kinds = [op.kind for op in plan.operations]

        first_delete = kinds.index(OperationKind.DELETE)
        assert OperationKind.ATTACH not in kinds[first_delete:]

    def test_deletes_deepest_first(self):
        """Every internal folder is deleted, descendants before ancestors."""
        plan = build_plan(wide_tree(), mirrors("A", "B", "C", "E"))
        deleted = [op.target_id for op in plan.delete_operations]

        assert deleted == ["C", "B", "E", "A"]

    def test_attach_targets_mirror(self):
        """Each file goes to the mirror of its own folder."""
        plan = build_plan(wide_tree(), mirrors("A", "B", "C", "E"))
        targets = {op.target_id: op.parent_id for op in plan.attach_operations}

        assert targets == {"fa": "new-A", "fb": "new-B", "fc": "new-C", "fe": "new-E"}

    def test_nothing_to_move(self):
        """A tree without files yields no operations at all."""
        entries = [
            FolderTreeEntry(["A"], ["Alpha"], [folder("B", "A")]),
            FolderTreeEntry(["A", "B"], ["Alpha", "Beta"], []),
        ]

        plan = build_plan(entries, mirrors("A", "B"))

        assert plan.nothing_to_move
        assert plan.operations == []
        assert plan.delete_operations == []

    def test_missing_mirror_skips_branch(self):
        """Files of unmirrored folders are reported; the rest still moves."""
        plan = build_plan(wide_tree(), mirrors("A", "E"))

        attached = {op.target_id for op in plan.attach_operations}
        assert attached == {"fa", "fe"}
        assert plan.skipped_folder_ids == ["B", "C"]
        assert set(plan.skipped_file_ids) == {"fb", "fc"}
        assert any("fb" in message for message in plan.diagnostics)
        assert any("fc" in message for message in plan.diagnostics)

    def test_missing_mirror_keeps_folder_and_ancestors(self):
        """Folders still holding files, and their ancestors, are not deleted."""
        plan = build_plan(wide_tree(), mirrors("A", "E"))
        deleted = [op.target_id for op in plan.delete_operations]

        assert deleted == ["E"]

    def test_all_mirrors_missing_is_nothing_to_move(self):
        """Without any attachable file no delete is emitted."""
        plan = build_plan(simple_tree(), mirrors("A"))

        assert plan.nothing_to_move
        assert plan.operations == []
        assert plan.skipped_file_ids == ["F1"]

    def test_unmirrored_empty_folder_reported(self):
        """A folder without files and without mirror still gets a diagnostic."""
        entries = wide_tree()
        entries[3].files_in_folder = []

        plan = build_plan(entries, mirrors("A", "B", "C"))

        assert "E" in plan.skipped_folder_ids
        assert any("Epsilon" in message for message in plan.diagnostics)

    def test_unknown_folder_child_is_attached(self):
        """A folder child that is not part of the subtree moves like a file."""
        entries = simple_tree()
        entries[1].files_in_folder.append(folder("late", "B"))

        plan = build_plan(entries, mirrors("A", "B"))

        assert {op.target_id for op in plan.attach_operations} == {"F1", "late"}

    def test_records_ancestry(self):
        """The plan keeps each folder's chain for the executor."""
        plan = build_plan(wide_tree(), mirrors("A", "B", "C", "E"))
        assert plan.folder_ancestry["C"] == ("A", "B", "C")


class TestCountEligibleFiles:
    """Tests for count_eligible_files function."""

    def test_counts_only_files(self):
        assert count_eligible_files(wide_tree()) == 4

    def test_folders_only(self):
        entries = [
            FolderTreeEntry(["A"], ["Alpha"], [folder("B", "A")]),
            FolderTreeEntry(["A", "B"], ["Alpha", "Beta"], []),
        ]
        assert count_eligible_files(entries) == 0

    def test_empty(self):
        assert count_eligible_files([FolderTreeEntry(["A"], ["Alpha"])]) == 0
