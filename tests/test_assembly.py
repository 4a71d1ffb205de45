# File: tests/test_assembly.py
"""
TETRAHEDRON TEST: Keyed Element Stiffness Assembled into a Structure
====================================================================

A regular tetrahedron with:
- 4 nodes (3 at base, 1 at apex)
- 6 bars (connecting all nodes), built through the factory
- Fixed base (all 3 base nodes pinned)
- Vertical load at apex

Expected behavior:
1. EQUILIBRIUM: ΣReactions = -ΣApplied loads
2. SYMMETRY: the three base nodes take equal vertical reactions
3. The assembled K is symmetric
"""

import numpy as np
import pytest

from keyed_stiffness.elements import CrossSection, FiniteElementNode, LinearTruss, Material
from keyed_stiffness.kernel import (
    TRANSLATIONS,
    DegreeOfFreedom,
    NodalDegreeOfFreedom,
    NodalDOFIndex,
    assemble_global_K,
)
from keyed_stiffness.stiffness import ElementStiffnessMatrixBuilderFactory

X, Y, Z = TRANSLATIONS


def make_regular_tetrahedron(base_radius: float = 1.0, height: float = 1.0):
    """
    Base triangle at z=0, equally spaced on a circle; apex above the centre.

    Returns:
    --------
    nodes : list of FiniteElementNode
    bars : list of LinearTruss
    """
    angles = [0, 2*np.pi/3, 4*np.pi/3]
    nodes = [
        FiniteElementNode(i, base_radius * np.cos(angle), base_radius * np.sin(angle), 0.0)
        for i, angle in enumerate(angles)
    ]
    nodes.append(FiniteElementNode(3, 0.0, 0.0, height))

    steel = Material(210e9)
    section = CrossSection(area=0.001)

    bars = []
    for i in range(3):
        bars.append(LinearTruss(nodes[i], nodes[(i + 1) % 3], steel, section))
    for i in range(3):
        bars.append(LinearTruss(nodes[i], nodes[3], steel, section))
    return nodes, bars


def solve_fixed_base(P=-10000.0):
    nodes, bars = make_regular_tetrahedron()
    factory = ElementStiffnessMatrixBuilderFactory()
    providers = [factory.create(bar) for bar in bars]

    index = NodalDOFIndex.for_nodes(nodes, TRANSLATIONS)
    K = assemble_global_K(index, providers)

    F = np.zeros(index.ndof)
    F[index.idx(nodes[3], Z)] = P

    fixed = [i for node in nodes[:3] for i in index.node_dofs(node)]
    free = [i for i in range(index.ndof) if i not in fixed]

    d = np.zeros(index.ndof)
    d[free] = np.linalg.solve(K[np.ix_(free, free)], F[free])
    R = K @ d - F
    return nodes, index, K, d, R


def test_index_numbering():
    nodes, _ = make_regular_tetrahedron()
    index = NodalDOFIndex.for_nodes(nodes, TRANSLATIONS)

    assert index.ndof == 12
    assert index.idx(nodes[1], X) == 3
    assert index.node_dofs(nodes[3]) == [9, 10, 11]
    assert NodalDegreeOfFreedom(nodes[0], DegreeOfFreedom.ZZ) not in index
    with pytest.raises(KeyError):
        index.idx(nodes[0], DegreeOfFreedom.ZZ)


def test_duplicate_index_keys_are_rejected():
    node = FiniteElementNode(0)
    key = NodalDegreeOfFreedom(node, X)
    with pytest.raises(ValueError):
        NodalDOFIndex((key, key))


class TestTetrahedron:

    def test_assembled_matrix_is_symmetric(self):
        _, _, K, _, _ = solve_fixed_base()
        np.testing.assert_allclose(K, K.T, rtol=1e-12, atol=1e-3)

    def test_vertical_load_equilibrium(self):
        P = -10000.0
        nodes, index, _, _, R = solve_fixed_base(P)

        Rz_total = sum(R[index.idx(node, Z)] for node in nodes[:3])
        Rx_total = sum(R[index.idx(node, X)] for node in nodes[:3])
        Ry_total = sum(R[index.idx(node, Y)] for node in nodes[:3])

        assert np.isclose(Rz_total, -P, rtol=1e-10), \
            f"Vertical equilibrium failed: ΣRz={Rz_total:.2f} N, applied={P:.2f} N"
        assert np.isclose(Rx_total, 0.0, atol=1e-6)
        assert np.isclose(Ry_total, 0.0, atol=1e-6)

    def test_symmetric_vertical_reactions(self):
        P = -10000.0
        nodes, index, _, _, R = solve_fixed_base(P)

        for node in nodes[:3]:
            rz = R[index.idx(node, Z)]
            assert np.isclose(rz, -P / 3, rtol=1e-6), \
                f"{node!r}: Rz={rz:.2f} N, expected={-P / 3:.2f} N"

    def test_apex_moves_straight_down(self):
        nodes, index, _, d, _ = solve_fixed_base()
        apex = nodes[3]
        assert d[index.idx(apex, Z)] < 0.0
        assert abs(d[index.idx(apex, X)]) < 1e-12
        assert abs(d[index.idx(apex, Y)]) < 1e-12
        print(f"✓ apex deflection = {d[index.idx(apex, Z)] * 1000:.4f} mm")
