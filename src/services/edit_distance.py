"""Levenshtein edit distance engine with operation backtrace and step trace."""
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class OperationKind(str, Enum):
    """Kind of a single edit operation."""
    SUBSTITUTE = "substitute"
    INSERT = "insert"
    DELETE = "delete"


Matrix = list[list[int]]


@dataclass(frozen=True)
class Operation:
    """
    One edit step of a minimal edit script.

    ``position`` is 1-based into the source for substitute/delete and
    1-based into the target for insert. Absent characters are ``None``.
    """
    position: int
    source_char: Optional[str]
    target_char: Optional[str]
    kind: OperationKind


@dataclass(frozen=True)
class Step:
    """String state after applying one operation."""
    index: int
    description: str
    result_snapshot: str


@dataclass(frozen=True)
class EditDistanceResult:
    """Distance, left-to-right operations and the matching trace."""
    distance: int
    operations: tuple[Operation, ...] = ()
    steps: tuple[Step, ...] = ()


def build_matrix(source: str, target: str) -> Matrix:
    """Fill the (m+1)x(n+1) distance matrix."""
    height = len(source) + 1
    width = len(target) + 1
    matrix: Matrix = [[0] * width for _ in range(height)]
    for i in range(height):
        matrix[i][0] = i
    for j in range(width):
        matrix[0][j] = j
    for i in range(1, height):
        for j in range(1, width):
            if source[i - 1] == target[j - 1]:
                matrix[i][j] = matrix[i - 1][j - 1]
            else:
                matrix[i][j] = 1 + min(
                    matrix[i - 1][j - 1],  # substitute
                    matrix[i - 1][j],      # delete
                    matrix[i][j - 1],      # insert
                )
    return matrix


def backtrace(matrix: Matrix, source: str, target: str) -> list[Operation]:
    """
    Walk the matrix from the bottom-right corner back to the origin.

    Ties are broken in a fixed order: match, substitute, delete, insert.
    Operations are prepended so the returned list is ordered left-to-right.
    """
    operations: list[Operation] = []
    i = len(source)
    j = len(target)

    while i > 0 or j > 0:
        if i > 0 and j > 0 and source[i - 1] == target[j - 1]:
            i -= 1
            j -= 1
        elif i > 0 and j > 0 and matrix[i][j] == matrix[i - 1][j - 1] + 1:
            operations.insert(0, Operation(i, source[i - 1], target[j - 1], OperationKind.SUBSTITUTE))
            i -= 1
            j -= 1
        elif i > 0 and matrix[i][j] == matrix[i - 1][j] + 1:
            operations.insert(0, Operation(i, source[i - 1], None, OperationKind.DELETE))
            i -= 1
        else:
            operations.insert(0, Operation(j, None, target[j - 1], OperationKind.INSERT))
            j -= 1

    return operations


def describe_operation(operation: Operation) -> str:
    """Human-readable description of a single operation."""
    if operation.kind == OperationKind.SUBSTITUTE:
        return (
            f"substitute '{operation.source_char}' -> '{operation.target_char}' "
            f"at position {operation.position}"
        )
    if operation.kind == OperationKind.DELETE:
        return f"delete '{operation.source_char}' at position {operation.position}"
    return f"insert '{operation.target_char}' at position {operation.position}"


def apply_operations(source: str, operations: list[Operation]) -> list[Step]:
    """
    Replay left-to-right operations on ``source`` and record every snapshot.

    Substitute and delete positions refer to the original source, so they
    are shifted by ``offset``, the net length change from earlier inserts
    and deletes. Insert positions refer to the target, whose prefix is
    already in place, so they are used as-is.
    """
    steps: list[Step] = []
    current = source
    offset = 0

    for index, operation in enumerate(operations, start=1):
        if operation.kind == OperationKind.SUBSTITUTE:
            pos = operation.position - 1 + offset
            current = current[:pos] + operation.target_char + current[pos + 1:]
        elif operation.kind == OperationKind.DELETE:
            pos = operation.position - 1 + offset
            current = current[:pos] + current[pos + 1:]
            offset -= 1
        else:
            pos = operation.position - 1
            current = current[:pos] + operation.target_char + current[pos:]
            offset += 1
        steps.append(Step(index, describe_operation(operation), current))

    return steps


def compute(source: str, target: str) -> EditDistanceResult:
    """Compute distance, operations and trace for two strings."""
    matrix = build_matrix(source, target)
    operations = backtrace(matrix, source, target)
    steps = apply_operations(source, operations)
    return EditDistanceResult(
        distance=matrix[-1][-1],
        operations=tuple(operations),
        steps=tuple(steps),
    )


def distance_only(a: str, b: str) -> int:
    """Calculate Levenshtein edit distance with two rolling rows."""
    if len(a) < len(b):
        return distance_only(b, a)

    if len(b) == 0:
        return len(a)

    previous_row = list(range(len(b) + 1))
    for i, c1 in enumerate(a):
        current_row = [i + 1]
        for j, c2 in enumerate(b):
            insertions = previous_row[j + 1] + 1
            deletions = current_row[j] + 1
            substitutions = previous_row[j] + (c1 != c2)
            current_row.append(min(insertions, deletions, substitutions))
        previous_row = current_row

    return previous_row[-1]


def render_trace(source: str, steps: list[Step], separator: str = " -> ") -> str:
    """Join ``source`` and every snapshot into a single forward trace."""
    return separator.join([source, *(step.result_snapshot for step in steps)])
