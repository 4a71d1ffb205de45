# File: tests/test_builder.py
"""
Test the generic builder protocol: initialisation, revision-based caching,
the singularity invariants and what a failed build leaves behind.
"""

import numpy as np
import pytest

from keyed_stiffness.config import KernelConfig
from keyed_stiffness.elements import CrossSection, FiniteElementNode, LinearTruss, Material
from keyed_stiffness.kernel import (
    DegreeOfFreedom,
    InvalidOperationError,
    KeyedMatrix,
    NonSingularStiffnessError,
    NotInitializedError,
    StiffnessMatrix,
)
from keyed_stiffness.stiffness import (
    ElementStiffnessMatrixBuilder,
    LinearTrussStiffnessMatrixBuilder,
    StiffnessProvider,
    is_numerically_singular,
)

X = DegreeOfFreedom.X


def make_truss(length=2.0):
    a = FiniteElementNode(0, 0.0, 0.0, 0.0)
    b = FiniteElementNode(1, length, 0.0, 0.0)
    return LinearTruss(a, b, Material(210e9), CrossSection(area=0.001))


class SwitchableTrussBuilder(LinearTrussStiffnessMatrixBuilder):
    """Truss builder that can be told to return an invertible local matrix."""

    def __init__(self, element, config=None):
        super().__init__(element, config)
        self.break_local_matrix = False
        self.local_builds = 0

    def local_stiffness_matrix(self) -> StiffnessMatrix:
        self.local_builds += 1
        k = super().local_stiffness_matrix()
        if self.break_local_matrix:
            k.values[:, :] += np.eye(k.shape[0])
        return k


class UninitializedBuilder(ElementStiffnessMatrixBuilder):
    """Skips the base constructor, so it never becomes initialised."""

    def __init__(self, element):
        self._element = element

    def local_stiffness_matrix(self):
        raise AssertionError("should not be reached")

    def shape_function_vector(self, location):
        raise AssertionError("should not be reached")

    def strain_displacement_matrix(self):
        raise AssertionError("should not be reached")


def test_builder_requires_an_element():
    with pytest.raises(ValueError):
        LinearTrussStiffnessMatrixBuilder(None)


def test_builder_satisfies_provider_capability():
    builder = LinearTrussStiffnessMatrixBuilder(make_truss())
    assert builder.is_initialized
    assert isinstance(builder, StiffnessProvider)


def test_use_before_initialisation_is_invalid_operation():
    builder = UninitializedBuilder(make_truss())
    assert not builder.is_initialized
    with pytest.raises(NotInitializedError):
        builder.global_stiffness_matrix
    with pytest.raises(InvalidOperationError):
        builder.build_rotation_matrix_from_local_to_global()


class TestCaching:

    def test_repeated_reads_return_the_same_object(self):
        builder = SwitchableTrussBuilder(make_truss())
        assert builder.is_stale

        first = builder.global_stiffness_matrix
        second = builder.global_stiffness_matrix

        assert first is second
        assert builder.local_builds == 1
        assert not builder.is_stale

    def test_changing_the_element_forces_rebuild(self):
        truss = make_truss()
        builder = SwitchableTrussBuilder(truss)
        a, b = truss.nodes

        before = builder.global_stiffness_matrix
        k_before = builder.global_stiffness_at(a, X, a, X)

        truss.material = Material(70e9)
        assert builder.is_stale

        after = builder.global_stiffness_matrix
        assert after is not before
        assert builder.local_builds == 2
        assert builder.global_stiffness_at(a, X, a, X) == pytest.approx(k_before * 70.0 / 210.0)

    def test_moving_a_node_forces_rebuild(self):
        truss = make_truss(length=2.0)
        builder = LinearTrussStiffnessMatrixBuilder(truss)
        a, b = truss.nodes
        k_before = builder.global_stiffness_at(a, X, b, X)

        truss.end = b.moved_to(4.0, 0.0, 0.0)

        assert builder.global_stiffness_at(a, X, b, X) == pytest.approx(k_before / 2.0)

    def test_revision_is_monotonic(self):
        truss = make_truss()
        revisions = [truss.revision]
        truss.cross_section = CrossSection(area=0.002)
        revisions.append(truss.revision)
        truss.material = Material(100e9)
        revisions.append(truss.revision)
        assert revisions == sorted(set(revisions))
        assert truss.is_dirty(revisions[0])
        assert not truss.is_dirty(revisions[-1])

    def test_builder_never_mutates_the_element(self):
        truss = make_truss()
        revision = truss.revision
        builder = LinearTrussStiffnessMatrixBuilder(truss)
        builder.global_stiffness_matrix
        assert truss.revision == revision


class TestSingularityInvariant:

    def test_non_singular_local_matrix_is_rejected(self):
        truss = make_truss()
        builder = SwitchableTrussBuilder(truss)
        builder.break_local_matrix = True

        with pytest.raises(NonSingularStiffnessError) as excinfo:
            builder.global_stiffness_matrix

        message = str(excinfo.value)
        assert "LinearTruss" in message
        assert repr(truss) in message
        assert excinfo.value.element is truss
        assert isinstance(excinfo.value, InvalidOperationError)

    def test_failed_build_keeps_previous_cache_and_stays_stale(self):
        truss = make_truss()
        builder = SwitchableTrussBuilder(truss)
        a, _ = truss.nodes
        good = builder.global_stiffness_matrix
        k_good = good.at(a, X, a, X)

        truss.material = Material(70e9)
        builder.break_local_matrix = True
        with pytest.raises(NonSingularStiffnessError):
            builder.global_stiffness_matrix

        # Nothing promoted: the old matrix is untouched and the builder is still stale
        assert good.at(a, X, a, X) == k_good
        assert builder.is_stale

        builder.break_local_matrix = False
        rebuilt = builder.global_stiffness_matrix
        assert rebuilt is not good
        assert rebuilt.at(a, X, a, X) == pytest.approx(k_good / 3.0)

    def test_check_can_be_disabled_by_config(self):
        builder = SwitchableTrussBuilder(make_truss(), config=KernelConfig(check_singularity=False))
        builder.break_local_matrix = True
        matrix = builder.global_stiffness_matrix
        assert matrix.determinant() != 0.0

    def test_singularity_is_relative_to_matrix_scale(self):
        """
        A 2×2 spring matrix is singular whatever its units; an identity
        is not, even when tiny.
        """
        for k in (1e-6, 1.0, 1e12):
            spring = KeyedMatrix.from_rows(["a", "b"], ["a", "b"], [[k, -k], [-k, k]])
            assert is_numerically_singular(spring, 1e-10)
        tiny = KeyedMatrix(["a", "b"], None, 1e-30 * np.eye(2))
        assert not is_numerically_singular(tiny, 1e-10)
        assert is_numerically_singular(KeyedMatrix(["a", "b"]), 1e-10)


class TestGlobalStiffnessAt:

    def test_none_nodes_are_invalid_arguments(self):
        truss = make_truss()
        builder = LinearTrussStiffnessMatrixBuilder(truss)
        a, b = truss.nodes
        with pytest.raises(ValueError):
            builder.global_stiffness_at(None, X, b, X)
        with pytest.raises(ValueError):
            builder.global_stiffness_at(a, X, None, X)

    def test_foreign_node_is_a_key_error(self):
        truss = make_truss()
        builder = LinearTrussStiffnessMatrixBuilder(truss)
        a, _ = truss.nodes
        with pytest.raises(KeyError):
            builder.global_stiffness_at(a, X, FiniteElementNode(99), X)
