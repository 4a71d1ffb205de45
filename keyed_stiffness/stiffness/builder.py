# keyed_stiffness/stiffness/builder.py
"""
ELEMENT STIFFNESS BUILDER: Local Matrix -> Global Matrix, with Invariants
========================================================================

PURPOSE:
--------
Every element family knows how to write its stiffness in its own local
frame. Everything else is shared and lives here:

    1. k = local_stiffness_matrix()            (family-specific)
    2. check k is singular                      (free element, rigid-body modes)
    3. T = local-to-global transform            (rotation.py)
    4. K = Tᵀ · k · T
    5. check K is singular                      (rotation preserves singularity)
    6. cache K with the element revision

CACHING:
--------
Builders are lazy. Reading `global_stiffness_matrix` rebuilds only when the
element's revision differs from the one recorded at the last build:

    builder.global_stiffness_matrix    # builds
    builder.global_stiffness_matrix    # same object, no work
    element.material = other
    builder.global_stiffness_matrix    # rebuilds

A failed build raises and leaves the previous cache untouched.

SINGULARITY:
------------
"Determinant is zero" is tested relative to the Hadamard bound, the largest
determinant any matrix with the same row norms could have:

    |det K| <= rtol × Π ||K_i||₂

so the check is insensitive to the units of the stiffness terms. A matrix
with a zero row has a bound of zero and passes only with det K == 0.

Builders are NOT thread safe: one builder, one thread (or external locking).
"""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional, Protocol, Sequence, runtime_checkable

import numpy as np

from ..config import CONFIG, KernelConfig
from ..kernel.dof import DegreeOfFreedom, NodalDegreeOfFreedom
from ..kernel.errors import NonSingularStiffnessError, NotInitializedError
from ..kernel.keyed import KeyedMatrix
from ..kernel.stiffness import StiffnessMatrix
from .rotation import element_rotation_matrix, expand_to_nodal_transform

logger = logging.getLogger(__name__)


@runtime_checkable
class StiffnessProvider(Protocol):
    """
    Capability consumed by whole-structure assembly: stiffness coefficients
    addressed by (node, DOF) pairs in the global frame.
    """

    @property
    def global_stiffness_matrix(self) -> StiffnessMatrix:
        """Raw keyed global matrix, for diagnostics and testing."""
        ...

    def global_stiffness_at(self, row_node, row_dof: DegreeOfFreedom,
                            column_node, column_dof: DegreeOfFreedom) -> float:
        ...


def is_numerically_singular(matrix: KeyedMatrix, rtol: float) -> bool:
    """
    True if |det(matrix)| <= rtol × (product of row 2-norms).

    Works in log space (numpy.linalg.slogdet) so large stiffness terms
    cannot overflow the determinant.
    """
    values = matrix.values
    sign, logdet = np.linalg.slogdet(values)
    if sign == 0.0:
        return True
    row_norms = np.linalg.norm(values, axis=1)
    if np.any(row_norms == 0.0):
        return True
    log_bound = float(np.sum(np.log(row_norms)))
    return bool(logdet <= np.log(rtol) + log_bound)


class ElementStiffnessMatrixBuilder(ABC):
    """
    Base class for per-family stiffness builders.

    A builder is bound to exactly one element at construction and never
    mutates it. Subclasses supply the local stiffness matrix, the shape
    function matrix and the strain-displacement matrix; the base class
    handles rotation, caching and the singularity invariants.

    Parameters:
    -----------
    element : FiniteElement
        The element this builder computes stiffness for
    config : KernelConfig, optional
        Numerical settings (defaults to the global CONFIG)

    Raises:
    -------
    ValueError
        If element is None
    """

    _initialized = False

    def __init__(self, element, config: Optional[KernelConfig] = None):
        if element is None:
            raise ValueError("element must not be None")
        self._element = element
        self._config = config if config is not None else CONFIG
        self._global_stiffness_matrix: Optional[StiffnessMatrix] = None
        self._built_at_revision: Optional[int] = None
        self._initialized = True

    @property
    def element(self):
        return self._element

    @property
    def config(self) -> KernelConfig:
        return self._config

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    @property
    def is_stale(self) -> bool:
        """True if no matrix has been built yet or the element changed since."""
        self._throw_if_not_initialized()
        return (
            self._global_stiffness_matrix is None
            or self._element.is_dirty(self._built_at_revision)
        )

    # ------------------------------------------------------------------
    # Family-specific routines
    # ------------------------------------------------------------------

    @abstractmethod
    def local_stiffness_matrix(self) -> StiffnessMatrix:
        """Stiffness in the element's local frame, keyed by element.nodal_degrees_of_freedom."""

    @abstractmethod
    def shape_function_vector(self, location) -> KeyedMatrix:
        """Shape functions at `location`: rows are DOFs, columns the supported nodal DOFs."""

    @abstractmethod
    def strain_displacement_matrix(self) -> KeyedMatrix:
        """B matrix: rows are Strain components, columns the supported nodal DOFs."""

    # ------------------------------------------------------------------
    # Public capability
    # ------------------------------------------------------------------

    @property
    def global_stiffness_matrix(self) -> StiffnessMatrix:
        """The element stiffness in global coordinates, rebuilt only when stale."""
        self._throw_if_not_initialized()
        if self.is_stale:
            revision = self._element.revision
            matrix = self._build_global_stiffness_matrix()
            self._global_stiffness_matrix = matrix
            self._built_at_revision = revision
            logger.debug("Built global stiffness of %r at revision %d", self._element, revision)
        return self._global_stiffness_matrix

    def global_stiffness_at(self, row_node, row_dof: DegreeOfFreedom,
                            column_node, column_dof: DegreeOfFreedom) -> float:
        """
        Stiffness coefficient linking a force at (row_node, row_dof) to a
        displacement at (column_node, column_dof), in global coordinates.

        Raises:
        -------
        ValueError
            If either node is None
        KeyError
            If a node is not part of this element
        """
        if row_node is None:
            raise ValueError("row_node must not be None")
        if column_node is None:
            raise ValueError("column_node must not be None")
        return self.global_stiffness_matrix.at(row_node, row_dof, column_node, column_dof)

    # ------------------------------------------------------------------
    # Rotation
    # ------------------------------------------------------------------

    def calculate_element_rotation_matrix(self) -> KeyedMatrix:
        self._throw_if_not_initialized()
        return element_rotation_matrix(self._element, self._config)

    def build_rotation_matrix_from_local_to_global(self) -> KeyedMatrix:
        self._throw_if_not_initialized()
        rotation = self.calculate_element_rotation_matrix()
        if (any(dof.is_rotation for dof in self._element.supported_dofs)
                and not np.allclose(rotation.values, np.eye(3))):
            logger.debug(
                "Rotational DOFs of %r pass through the transform unrotated", self._element
            )
        return expand_to_nodal_transform(rotation, self._element.nodal_degrees_of_freedom)

    # ------------------------------------------------------------------
    # Helpers for subclasses
    # ------------------------------------------------------------------

    @property
    def supported_nodal_dofs(self) -> List[NodalDegreeOfFreedom]:
        """Node-major keys of the DOFs this element carries stiffness in."""
        supported = self._element.supported_dofs
        return [NodalDegreeOfFreedom(node, dof) for node in self._element.nodes for dof in supported]

    def _stiffness_from_block(self, keys: Sequence[NodalDegreeOfFreedom], block: np.ndarray) -> StiffnessMatrix:
        """Place a dense block (ordered like `keys`) into a zero matrix over all element keys."""
        k = StiffnessMatrix(self._element.nodal_degrees_of_freedom)
        positions = [k.row_position(key) for key in keys]
        k.values[np.ix_(positions, positions)] = block
        return k

    def _throw_if_not_initialized(self) -> None:
        if not self._initialized:
            raise NotInitializedError(
                f"This {type(self).__name__} has not been initialized correctly. "
                f"It must be constructed with the element it builds stiffness for."
            )

    # ------------------------------------------------------------------
    # Build
    # ------------------------------------------------------------------

    def _build_global_stiffness_matrix(self) -> StiffnessMatrix:
        self._throw_if_not_initialized()

        k = self.local_stiffness_matrix()
        self._check_singular(k, "stiffness matrix")

        t = self.build_rotation_matrix_from_local_to_global()
        kt = k @ t
        ttkt = t.T @ kt
        global_k = StiffnessMatrix.from_keyed(ttkt)

        self._check_singular(global_k, "global stiffness matrix")
        return global_k

    def _check_singular(self, matrix: KeyedMatrix, what: str) -> None:
        if not self._config.check_singularity:
            return
        if not is_numerically_singular(matrix, self._config.singularity_rtol):
            determinant = matrix.determinant()
            raise NonSingularStiffnessError(
                f"The {what} for an individual element should be singular and non-invertible, "
                f"i.e. it should have a zero determinant. This is not the case for element "
                f"{self._element!r} of type {type(self._element).__name__} (det={determinant:.6e})",
                element=self._element,
                determinant=determinant,
            )
