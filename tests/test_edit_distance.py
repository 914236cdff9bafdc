import pytest

from src.services.edit_distance import (
    EditDistanceResult,
    Operation,
    OperationKind,
    Step,
    apply_operations,
    backtrace,
    build_matrix,
    compute,
    describe_operation,
    distance_only,
    render_trace,
)

SUB = OperationKind.SUBSTITUTE
INS = OperationKind.INSERT
DEL = OperationKind.DELETE

WORDS = ["", "a", "b", "ab", "ba", "abc", "CAT", "CUT", "kitten", "sitting",
         "Orange", "Apple", "intention", "execution", "aaa", "banana", "café"]
PAIRS = [(s, t) for s in WORDS for t in WORDS]


def test_cat_cut():
    result = compute("CAT", "CUT")
    assert result.distance == 1
    assert result.operations == (Operation(2, "A", "U", SUB),)
    assert result.steps == (Step(1, "substitute 'A' -> 'U' at position 2", "CUT"),)


def test_both_empty():
    assert compute("", "") == EditDistanceResult(distance=0, operations=(), steps=())


def test_kitten_sitting():
    result = compute("kitten", "sitting")
    assert result.distance == 3
    assert list(result.operations) == [
        Operation(1, "k", "s", SUB),
        Operation(5, "e", "i", SUB),
        Operation(7, None, "g", INS),
    ]
    assert [s.result_snapshot for s in result.steps] == ["sitten", "sittin", "sitting"]


def test_delete_everything():
    result = compute("abc", "")
    assert result.distance == 3
    assert [op.kind for op in result.operations] == [DEL, DEL, DEL]
    assert [op.position for op in result.operations] == [1, 2, 3]
    assert all(op.target_char is None for op in result.operations)
    assert [s.result_snapshot for s in result.steps] == ["bc", "c", ""]


def test_insert_everything():
    result = compute("", "abc")
    assert result.distance == 3
    assert [op.kind for op in result.operations] == [INS, INS, INS]
    assert all(op.source_char is None for op in result.operations)
    assert [s.result_snapshot for s in result.steps] == ["a", "ab", "abc"]


def test_single_substitution():
    result = compute("a", "b")
    assert result.distance == 1
    assert result.operations == (Operation(1, "a", "b", SUB),)
    assert result.steps[0].result_snapshot == "b"


def test_swap_prefers_substitution():
    result = compute("ab", "ba")
    assert result.distance == 2
    assert list(result.operations) == [
        Operation(1, "a", "b", SUB),
        Operation(2, "b", "a", SUB),
    ]
    assert [s.result_snapshot for s in result.steps] == ["bb", "ba"]


def test_delete_then_insert_replays_to_target():
    result = compute("abc", "bcd")
    assert list(result.operations) == [
        Operation(1, "a", None, DEL),
        Operation(3, None, "d", INS),
    ]
    assert [s.result_snapshot for s in result.steps] == ["bc", "bcd"]


def test_insert_mirrors_delete():
    forward = compute("abc", "abcd")
    backward = compute("abcd", "abc")
    assert forward.operations == (Operation(4, None, "d", INS),)
    assert backward.operations == (Operation(4, "d", None, DEL),)


def test_mirror_positions_follow_tie_break():
    # Reversing the inputs keeps the distance but not the mirrored positions
    forward = compute("aba", "bab")
    backward = compute("bab", "aba")
    assert forward.distance == backward.distance == 2
    assert list(forward.operations) == [
        Operation(1, None, "b", INS),
        Operation(3, "a", None, DEL),
    ]
    assert list(backward.operations) == [
        Operation(1, None, "a", INS),
        Operation(3, "b", None, DEL),
    ]


def test_code_points():
    result = compute("café", "cafe")
    assert result.operations == (Operation(4, "é", "e", SUB),)


@pytest.mark.parametrize("s", WORDS)
def test_identical_strings(s):
    result = compute(s, s)
    assert result.distance == 0
    assert result.operations == ()
    assert result.steps == ()


@pytest.mark.parametrize("s", WORDS)
def test_from_and_to_empty(s):
    inserted = compute("", s)
    deleted = compute(s, "")
    assert inserted.distance == deleted.distance == len(s)
    assert all(op.kind == INS for op in inserted.operations)
    assert all(op.kind == DEL for op in deleted.operations)


@pytest.mark.parametrize("s,t", PAIRS)
def test_properties(s, t):
    result = compute(s, t)
    assert result.distance == compute(t, s).distance
    assert abs(len(s) - len(t)) <= result.distance <= max(len(s), len(t))
    assert result.distance == len(result.operations) == len(result.steps)
    assert [step.index for step in result.steps] == list(range(1, len(result.steps) + 1))
    if result.steps:
        assert result.steps[-1].result_snapshot == t
    assert result.distance == distance_only(s, t)


def test_operations_are_left_to_right():
    result = compute("intention", "execution")
    positions = [op.position for op in result.operations if op.kind != INS]
    assert positions == sorted(positions)


def test_build_matrix_base_cases():
    matrix = build_matrix("abc", "de")
    assert [row[0] for row in matrix] == [0, 1, 2, 3]
    assert matrix[0] == [0, 1, 2]
    assert matrix[-1][-1] == 3


def test_backtrace_on_equal_strings_emits_nothing():
    assert backtrace(build_matrix("abc", "abc"), "abc", "abc") == []


def test_apply_operations_in_isolation():
    operations = [
        Operation(1, None, "a", INS),
        Operation(1, "x", "b", SUB),
    ]
    steps = apply_operations("x", operations)
    assert [s.result_snapshot for s in steps] == ["ax", "ab"]
    assert [s.index for s in steps] == [1, 2]


def test_apply_operations_empty():
    assert apply_operations("abc", []) == []


def test_describe_operation():
    assert describe_operation(Operation(3, "a", "b", SUB)) == "substitute 'a' -> 'b' at position 3"
    assert describe_operation(Operation(2, "a", None, DEL)) == "delete 'a' at position 2"
    assert describe_operation(Operation(5, None, "z", INS)) == "insert 'z' at position 5"


def test_render_trace():
    result = compute("kitten", "sitting")
    assert render_trace("kitten", list(result.steps)) == "kitten -> sitten -> sittin -> sitting"
    assert render_trace("abc", []) == "abc"


def test_distance_only():
    assert distance_only("kitten", "sitting") == 3
    assert distance_only("", "abc") == 3
    assert distance_only("abc", "") == 3
    assert distance_only("Orange", "Apple") == 5
