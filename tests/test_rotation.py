# File: tests/test_rotation.py
"""
Test the local-to-global rotation: the 3×3 direction cosine matrix from an
axis triad, its per-node expansion, and the local axes elements derive.
"""

import numpy as np
import pytest

from keyed_stiffness.config import KernelConfig
from keyed_stiffness.elements import (
    CrossSection,
    FiniteElementNode,
    LinearConstantStrainTriangle,
    LinearTruss,
    Material,
)
from keyed_stiffness.kernel import (
    ROTATIONS,
    TRANSLATIONS,
    DegreeOfFreedom,
    KeyedVector,
    NodalDegreeOfFreedom,
    nodal_dofs,
    ALL_DOFS,
)
from keyed_stiffness.stiffness import expand_to_nodal_transform, rotation_matrix_from_axes

STEEL = Material(210e9, 0.3)
SECTION = CrossSection(area=0.001)


def test_identity_triad_gives_identity():
    R = rotation_matrix_from_axes([1, 0, 0], [0, 1, 0], [0, 0, 1])
    np.testing.assert_array_equal(R.values, np.eye(3))
    assert R.row_keys == TRANSLATIONS
    assert R.column_keys == TRANSLATIONS


def test_axes_are_normalised_independently():
    R = rotation_matrix_from_axes([5, 0, 0], [0, 0.1, 0], [0, 0, 42])
    np.testing.assert_allclose(R.values, np.eye(3))


def test_rows_are_local_axes():
    x = np.array([1.0, 1.0, 0.0])
    y = np.array([-1.0, 1.0, 0.0])
    z = np.array([0.0, 0.0, 3.0])
    R = rotation_matrix_from_axes(x, y, z)
    s = 1.0 / np.sqrt(2.0)
    np.testing.assert_allclose(R.values, [[s, s, 0], [-s, s, 0], [0, 0, 1]])
    # Orthonormal: R Rᵀ = I
    np.testing.assert_allclose(R.values @ R.values.T, np.eye(3), atol=1e-12)


def test_keyed_vector_axes_accepted():
    axes = [KeyedVector(TRANSLATIONS, row) for row in np.eye(3)]
    R = rotation_matrix_from_axes(*axes)
    np.testing.assert_array_equal(R.values, np.eye(3))


@pytest.mark.parametrize("position, name", [(0, "x_axis"), (1, "y_axis"), (2, "z_axis")])
def test_zero_axis_is_rejected_by_name(position, name):
    axes = [[1, 0, 0], [0, 1, 0], [0, 0, 1]]
    axes[position] = [0, 0, 0]
    with pytest.raises(ValueError, match=name):
        rotation_matrix_from_axes(*axes)


def test_axis_must_be_three_dimensional():
    with pytest.raises(ValueError, match="y_axis"):
        rotation_matrix_from_axes([1, 0, 0], [0, 1], [0, 0, 1])
    with pytest.raises(ValueError, match="x_axis"):
        rotation_matrix_from_axes(KeyedVector(["a", "b"], [1, 1]), [0, 1, 0], [0, 0, 1])


def test_expanded_transform_is_block_diagonal():
    """
    Per node: R on (X, Y, Z), identity on (XX, YY, ZZ), zero across nodes.
    """
    n0, n1 = FiniteElementNode(0), FiniteElementNode(1)
    c, s = np.cos(0.3), np.sin(0.3)
    R = rotation_matrix_from_axes([c, s, 0], [-s, c, 0], [0, 0, 1])

    T = expand_to_nodal_transform(R, nodal_dofs([n0, n1], ALL_DOFS))

    assert T.shape == (12, 12)
    for node in (n0, n1):
        for a in TRANSLATIONS:
            for b in TRANSLATIONS:
                assert T.at(NodalDegreeOfFreedom(node, a), NodalDegreeOfFreedom(node, b)) == R.at(a, b)
        for a in ROTATIONS:
            for b in ROTATIONS:
                expected = 1.0 if a == b else 0.0
                assert T.at(NodalDegreeOfFreedom(node, a), NodalDegreeOfFreedom(node, b)) == expected

    cross = T.at(NodalDegreeOfFreedom(n0, DegreeOfFreedom.X), NodalDegreeOfFreedom(n1, DegreeOfFreedom.X))
    assert cross == 0.0
    # Translation/rotation coupling is zero
    assert T.at(NodalDegreeOfFreedom(n0, DegreeOfFreedom.X), NodalDegreeOfFreedom(n0, DegreeOfFreedom.ZZ)) == 0.0
    # Orthogonal overall
    np.testing.assert_allclose(T.values @ T.values.T, np.eye(12), atol=1e-12)


class TestElementLocalAxes:

    def test_member_along_x_has_identity_triad(self):
        bar = LinearTruss(FiniteElementNode(0), FiniteElementNode(1, 4.0, 0.0, 0.0), STEEL, SECTION)
        x, y, z = bar.local_axes()
        np.testing.assert_allclose(np.vstack([x, y, z]), np.eye(3), atol=1e-15)

    def test_vertical_member_uses_global_y(self):
        bar = LinearTruss(FiniteElementNode(0), FiniteElementNode(1, 0.0, 0.0, 2.0), STEEL, SECTION)
        x, y, z = bar.local_axes()
        np.testing.assert_allclose(x, [0, 0, 1])
        np.testing.assert_allclose(y, [0, 1, 0])
        np.testing.assert_allclose(z, [-1, 0, 0])

    @pytest.mark.parametrize("end", [(1.0, 2.0, 2.0), (-3.0, 0.5, 0.0), (0.0, -1.0, 7.0), (1e-5, 1e-5, 1.0)])
    def test_triad_is_right_handed_orthonormal(self, end):
        bar = LinearTruss(FiniteElementNode(0), FiniteElementNode(1, *end), STEEL, SECTION)
        x, y, z = bar.local_axes()
        M = np.vstack([x, y, z])
        np.testing.assert_allclose(M @ M.T, np.eye(3), atol=1e-12)
        np.testing.assert_allclose(np.cross(x, y), z, atol=1e-12)

    def test_nearly_vertical_member_projects_global_y(self):
        """
        A member leaning 1e-5 off vertical still takes the vertical branch;
        y is global Y with its small component along x removed.
        """
        bar = LinearTruss(FiniteElementNode(0), FiniteElementNode(1, 1e-5, 1e-5, 1.0), STEEL, SECTION)
        x, y, z = bar.local_axes(KernelConfig(parallel_tolerance=1e-3))
        assert abs(np.dot(x, y)) < 1e-14
        assert np.linalg.norm(y) == pytest.approx(1.0, abs=1e-14)
        assert y[1] == pytest.approx(1.0, abs=1e-9)
        np.testing.assert_allclose(np.cross(x, y), z, atol=1e-14)

    def test_vertical_tolerance_comes_from_config(self):
        bar = LinearTruss(FiniteElementNode(0), FiniteElementNode(1, 0.01, 0.01, 1.0), STEEL, SECTION)
        _, y_default, _ = bar.local_axes()
        _, y_loose, _ = bar.local_axes(KernelConfig(parallel_tolerance=0.1))
        np.testing.assert_allclose(y_default, [-np.sqrt(0.5), np.sqrt(0.5), 0.0], atol=1e-12)
        assert y_loose[1] > 0.99

    def test_zero_length_member_is_rejected(self):
        bar = LinearTruss(FiniteElementNode(0, 1.0, 1.0, 1.0), FiniteElementNode(1, 1.0, 1.0, 1.0), STEEL, SECTION)
        with pytest.raises(ValueError, match="zero length"):
            bar.local_axes()

    def test_planar_triad_normal_to_plane(self):
        tri = LinearConstantStrainTriangle(
            FiniteElementNode(0, 0.0, 0.0, 0.0),
            FiniteElementNode(1, 1.0, 0.0, 0.0),
            FiniteElementNode(2, 0.0, 0.0, 1.0),
            STEEL, thickness=0.01,
        )
        x, y, z = tri.local_axes()
        np.testing.assert_allclose(x, [1, 0, 0])
        np.testing.assert_allclose(z, [0, -1, 0])
        np.testing.assert_allclose(y, [0, 0, 1])

    def test_collinear_planar_nodes_are_rejected(self):
        tri = LinearConstantStrainTriangle(
            FiniteElementNode(0, 0.0, 0.0, 0.0),
            FiniteElementNode(1, 1.0, 0.0, 0.0),
            FiniteElementNode(2, 2.0, 0.0, 0.0),
            STEEL, thickness=0.01,
        )
        with pytest.raises(ValueError, match="collinear"):
            tri.local_axes()

    def test_nearly_collinear_planar_nodes_are_rejected(self):
        """Node 2 is 3 × node 1 up to rounding: area ~1e-18 on edges ~0.4 and ~1.1."""
        tri = LinearConstantStrainTriangle(
            FiniteElementNode(0, 0.0, 0.0, 0.0),
            FiniteElementNode(1, 0.1, 0.2, 0.3),
            FiniteElementNode(2, 0.3, 0.6, 0.9),
            STEEL, thickness=0.01,
        )
        with pytest.raises(ValueError, match="collinear"):
            tri.local_axes()

    def test_collinearity_tolerance_is_relative(self):
        """The same slender shape is accepted or rejected regardless of its size."""
        for scale in (1e-3, 1.0, 1e3):
            tri = LinearConstantStrainTriangle(
                FiniteElementNode(0, 0.0, 0.0, 0.0),
                FiniteElementNode(1, scale, 0.0, 0.0),
                FiniteElementNode(2, 0.5 * scale, 1e-6 * scale, 0.0),
                STEEL, thickness=0.01,
            )
            z = tri.local_axes()[2]
            np.testing.assert_allclose(z, [0, 0, 1])
            with pytest.raises(ValueError, match="collinear"):
                tri.local_axes(KernelConfig(degeneracy_tolerance=1e-5))
