# keyed_stiffness/stiffness/truss.py
"""
TRUSS / SPRING BUILDER: Axial-Only Two-Node Elements
====================================================

In LOCAL coordinates (x' along the member) an axial element is simply:

    k_local = k × [  1  -1 ]      on (start, X), (end, X)
                  [ -1   1 ]

with k = EA/L for a truss and k = spring_constant for a spring. All other
entries of the (2 nodes × 6 DOF) local matrix are zero. The rotation to
global coordinates then spreads k over X, Y, Z through the direction
cosines (l, m, n) of the member:

    K_global = k × [  B  -B ]     B = [l, m, n]ᵀ [l, m, n]
                   [ -B   B ]

(translational block shown; rotational rows stay zero).
"""

import numpy as np

from ..kernel.dof import DegreeOfFreedom, NodalDegreeOfFreedom, Strain
from ..kernel.keyed import KeyedMatrix
from ..kernel.stiffness import StiffnessMatrix
from .builder import ElementStiffnessMatrixBuilder


class LinearTrussStiffnessMatrixBuilder(ElementStiffnessMatrixBuilder):
    """
    Builder for LinearTruss and LinearConstantSpring.

    The element must expose `axial_stiffness` (N/m), `length` and
    `normalized_position(location, config)`.
    """

    def local_stiffness_matrix(self) -> StiffnessMatrix:
        element = self.element
        k = element.axial_stiffness
        keys = [
            NodalDegreeOfFreedom(element.start, DegreeOfFreedom.X),
            NodalDegreeOfFreedom(element.end, DegreeOfFreedom.X),
        ]
        block = k * np.array([
            [ 1.0, -1.0],
            [-1.0,  1.0],
        ])
        return self._stiffness_from_block(keys, block)

    def shape_function_vector(self, location) -> KeyedMatrix:
        """
        Linear interpolation of axial displacement:

            N = [1 - ξ, ξ],    ξ = (distance of location along the axis) / L
        """
        if location is None:
            raise ValueError("location must not be None")
        xi = self.element.normalized_position(location, self.config)
        return KeyedMatrix.from_rows(
            [DegreeOfFreedom.X],
            self.supported_nodal_dofs,
            [[1.0 - xi, xi]],
        )

    def strain_displacement_matrix(self) -> KeyedMatrix:
        """Axial strain ε = (u_end - u_start) / L."""
        L = self.element.length
        return KeyedMatrix.from_rows(
            [Strain.LINEAR_STRAIN_X],
            self.supported_nodal_dofs,
            [[-1.0 / L, 1.0 / L]],
        )
