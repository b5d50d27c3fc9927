import numpy as np
import pytest

from simcircuit import (
    ArithmeticOverflowError,
    CircuitBuilder,
    CircuitExecutor,
    DivisionByZeroError,
    ExecutionError,
    UnsupportedOperationError,
)
from simcircuit.lib.arithmetic import (
    ArithmeticGate,
    ArithmeticOp,
    apply_op,
    arithmetic_gates,
)


def test_x_mul_x() -> None:
    builder: CircuitBuilder[np.uint32] = CircuitBuilder()
    builder.add_inputs([0])
    builder.add_component(ArithmeticGate("AMul", 0, 0, 1))
    builder.add_outputs([1])
    executor = CircuitExecutor(builder.build())
    assert executor.run({0: np.uint32(5)}) == {1: np.uint32(25)}


def test_matrix_multiplication() -> None:
    # [1 2]   [1 1]   [3 3]
    # [3 4] x [1 1] = [7 7]
    gates = arithmetic_gates(
        [
            (0, 4, 8, "AMul"),
            (1, 6, 9, "AMul"),
            (8, 9, 10, "AAdd"),
            (0, 5, 11, "AMul"),
            (1, 7, 12, "AMul"),
            (11, 12, 13, "AAdd"),
            (2, 4, 14, "AMul"),
            (3, 6, 15, "AMul"),
            (14, 15, 16, "AAdd"),
            (2, 5, 17, "AMul"),
            (3, 7, 18, "AMul"),
            (17, 18, 19, "AAdd"),
        ]
    )
    builder: CircuitBuilder[np.uint32] = CircuitBuilder()
    builder.add_inputs(range(8))
    for gate in gates:
        builder.add_component(gate)
    builder.add_outputs([10, 13, 16, 19])
    executor = CircuitExecutor(builder.build())
    values = [1, 2, 3, 4, 1, 1, 1, 1]
    result = executor.run({i: np.uint32(v) for i, v in enumerate(values)})
    assert result == {10: 3, 13: 3, 16: 7, 19: 7}


def test_constants_in_arithmetic_circuit() -> None:
    builder: CircuitBuilder[int] = CircuitBuilder()
    builder.add_inputs([0])
    builder.add_constants({1: 10})
    builder.add_component(ArithmeticGate(ArithmeticOp.SUB, 1, 0, 2))
    builder.add_outputs([2])
    assert CircuitExecutor(builder.build()).run({0: 3}) == {2: 7}


def test_division_by_zero() -> None:
    builder: CircuitBuilder[int] = CircuitBuilder()
    builder.add_inputs([0, 1])
    builder.add_component(ArithmeticGate(ArithmeticOp.INT_DIV, 0, 1, 2))
    builder.add_outputs([2])
    executor = CircuitExecutor(builder.build())
    assert executor.run({0: 7, 1: 2}) == {2: 3}
    with pytest.raises(ExecutionError) as exc_info:
        executor.run({0: 7, 1: 0})
    assert isinstance(exc_info.value.error, DivisionByZeroError)


def test_modulus_by_zero() -> None:
    with pytest.raises(DivisionByZeroError):
        apply_op(ArithmeticOp.MOD, np.uint32(3), np.uint32(0))


def test_overflow() -> None:
    with pytest.raises(ArithmeticOverflowError):
        apply_op(ArithmeticOp.ADD, np.uint32(2**32 - 1), np.uint32(1))
    with pytest.raises(ArithmeticOverflowError):
        apply_op(ArithmeticOp.SUB, np.uint32(1), np.uint32(2))


@pytest.mark.parametrize(
    "op, lhs, rhs",
    [
        (ArithmeticOp.POW, 2, 40),
        (ArithmeticOp.POW, 2, 32),
        (ArithmeticOp.POW, 65536, 2),
        (ArithmeticOp.SHIFT_L, 1, 40),
        (ArithmeticOp.SHIFT_L, 1, 32),
        (ArithmeticOp.SHIFT_L, 2**31, 1),
        (ArithmeticOp.SHIFT_R, 16, 32),
        (ArithmeticOp.SHIFT_R, 16, 40),
    ],
)
def test_overflow_of_powers_and_shifts(op: ArithmeticOp, lhs: int, rhs: int) -> None:
    with pytest.raises(ArithmeticOverflowError):
        apply_op(op, np.uint32(lhs), np.uint32(rhs))


@pytest.mark.parametrize(
    "op, lhs, rhs, expected",
    [
        (ArithmeticOp.POW, 2, 31, 2**31),
        (ArithmeticOp.POW, 65535, 2, 65535**2),
        (ArithmeticOp.POW, 1, 1000, 1),
        (ArithmeticOp.POW, 0, 1000, 0),
        (ArithmeticOp.SHIFT_L, 1, 31, 2**31),
        (ArithmeticOp.SHIFT_R, 2**31, 31, 1),
    ],
)
def test_powers_and_shifts_at_the_limit(
    op: ArithmeticOp, lhs: int, rhs: int, expected: int
) -> None:
    result = apply_op(op, np.uint32(lhs), np.uint32(rhs))
    assert result == expected
    assert isinstance(result, np.uint32)


def test_shift_overflow_in_circuit() -> None:
    builder: CircuitBuilder[np.uint32] = CircuitBuilder()
    builder.add_inputs([0, 1])
    builder.add_component(ArithmeticGate("AShiftL", 0, 1, 2))
    builder.add_outputs([2])
    executor = CircuitExecutor(builder.build())
    assert executor.run({0: np.uint32(3), 1: np.uint32(4)}) == {2: 48}
    with pytest.raises(ExecutionError) as exc_info:
        executor.run({0: np.uint32(1), 1: np.uint32(40)})
    assert isinstance(exc_info.value.error, ArithmeticOverflowError)


def test_negative_exponent() -> None:
    with pytest.raises(UnsupportedOperationError):
        apply_op(ArithmeticOp.POW, np.int32(2), np.int32(-1))


def test_python_ints_do_not_overflow() -> None:
    assert apply_op(ArithmeticOp.ADD, 2**32 - 1, 1) == 2**32
    assert apply_op(ArithmeticOp.SHIFT_L, 1, 40) == 2**40


def test_true_division() -> None:
    with pytest.raises(UnsupportedOperationError):
        apply_op(ArithmeticOp.DIV, 1, 2)
    assert apply_op(ArithmeticOp.DIV, 1.0, 4.0) == 0.25


@pytest.mark.parametrize(
    "op, lhs, rhs, expected",
    [
        (ArithmeticOp.LT, 1, 2, 1),
        (ArithmeticOp.GEQ, 1, 2, 0),
        (ArithmeticOp.EQ, 3, 3, 1),
        (ArithmeticOp.NEQ, 3, 3, 0),
        (ArithmeticOp.BOOL_AND, 3, 0, 0),
        (ArithmeticOp.BOOL_OR, 3, 0, 1),
        (ArithmeticOp.BIT_AND, 6, 3, 2),
        (ArithmeticOp.BIT_OR, 6, 3, 7),
        (ArithmeticOp.XOR, 6, 3, 5),
        (ArithmeticOp.SHIFT_L, 1, 4, 16),
        (ArithmeticOp.SHIFT_R, 16, 2, 4),
        (ArithmeticOp.POW, 3, 4, 81),
        (ArithmeticOp.MOD, 17, 5, 2),
    ],
)
def test_operations(op: ArithmeticOp, lhs: int, rhs: int, expected: int) -> None:
    result = apply_op(op, np.uint32(lhs), np.uint32(rhs))
    assert result == expected
    assert isinstance(result, np.uint32)


def test_gate_rewire() -> None:
    gate = ArithmeticGate("AAdd", 0, 1, 2)
    assert gate.op is ArithmeticOp.ADD
    assert gate.rewire([3, 4], [5]) == ArithmeticGate(ArithmeticOp.ADD, 3, 4, 5)
