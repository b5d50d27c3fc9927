from itertools import product

import pytest

from simcircuit import CircuitExecutor, CircuitMemory
from simcircuit.lib.bincirc import (
    BinaryGate,
    BinaryOp,
    and_,
    full_adder,
    half_adder,
    nand_,
    not_,
    or_,
    rc_adder,
    xor_,
)


@pytest.mark.parametrize("a, b", list(product([False, True], repeat=2)))
def test_binary_gates(a: bool, b: bool) -> None:
    memory_values = {0: a, 1: b}
    expected = {
        and_(0, 1, 2): a and b,
        or_(0, 1, 2): a or b,
        xor_(0, 1, 2): a != b,
        nand_(0, 1, 2): not (a and b),
        not_(0, 2): not a,
    }
    for gate, value in expected.items():
        memory: CircuitMemory[bool] = CircuitMemory(3)
        for node, v in memory_values.items():
            memory.write(node, v)
        gate.execute(memory)
        assert memory.read(2) is value


def test_gate_arity() -> None:
    with pytest.raises(ValueError):
        BinaryGate(BinaryOp.NOT, [0, 1], [2])
    with pytest.raises(ValueError):
        BinaryGate(BinaryOp.AND, [0], [2])
    with pytest.raises(ValueError):
        BinaryGate(BinaryOp.AND, [0, 1], [2, 3])


def test_gate_rewire() -> None:
    gate = and_(0, 1, 2)
    rewired = gate.rewire([5, 6], [7])
    assert rewired == and_(5, 6, 7)
    assert rewired.op is BinaryOp.AND
    assert gate.inputs == (0, 1)


@pytest.mark.parametrize("a, b", list(product([False, True], repeat=2)))
def test_half_adder(a: bool, b: bool) -> None:
    total = int(a) + int(b)
    result = CircuitExecutor(half_adder).run({0: a, 1: b})
    assert result == {2: bool(total & 1), 3: bool(total & 2)}


def test_full_adder() -> None:
    executor = CircuitExecutor(full_adder)
    output = executor.run({0: True, 1: True, 2: False})
    assert output[5] is False
    assert output[7] is True


@pytest.mark.parametrize("a, b, c", list(product([False, True], repeat=3)))
def test_full_adder_truth_table(a: bool, b: bool, c: bool) -> None:
    total = int(a) + int(b) + int(c)
    result = CircuitExecutor(full_adder).run({0: a, 1: b, 2: c})
    assert result == {5: bool(total & 1), 7: bool(total & 2)}


def _bits(n: int, num_bits: int) -> list[bool]:
    return [bool((n >> i) & 1) for i in range(num_bits)]


@pytest.mark.parametrize("num_bits", [1, 3])
def test_rc_adder(num_bits: int) -> None:
    circuit = rc_adder(num_bits)
    assert circuit.depth == 1
    assert circuit.num_components == num_bits
    executor = CircuitExecutor(circuit)
    for x, y, c in product(range(2**num_bits), range(2**num_bits), [0, 1]):
        inputs = {0: bool(c)}
        for i, (a, b) in enumerate(zip(_bits(x, num_bits), _bits(y, num_bits))):
            inputs[2 * i + 1] = a
            inputs[2 * i + 2] = b
        result = executor.run(inputs)
        out_bits = [result[node] for node in circuit.outputs]
        assert sum(bit << i for i, bit in enumerate(out_bits)) == x + y + c


def test_rc_adder_invalid() -> None:
    with pytest.raises(ValueError):
        rc_adder(0)
