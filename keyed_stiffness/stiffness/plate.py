# keyed_stiffness/stiffness/plate.py
"""
MEMBRANE BUILDERS: Plane Stress Triangles and Quadrilaterals
============================================================

Both elements work in the element's own plane (local x, y) and carry
in-plane X and Y at every node. With the plane stress constitutive matrix

    D = E / (1 - ν²) × [ 1  ν      0     ]
                       [ ν  1      0     ]
                       [ 0  0  (1 - ν)/2 ]

the stiffness is  k = t × A × Bᵀ D B  where B maps nodal displacements to
(εx, εy, γxy). For the constant strain triangle B is exact and constant;
the constant stress quadrilateral samples B at its centroid (one-point
integration), which gives the same closed form.

Nodes must be ordered counter-clockwise about the element normal; the local
frame built from the first three nodes guarantees this for convex elements.
"""

from abc import abstractmethod
from typing import Tuple

import numpy as np

from ..kernel.dof import DegreeOfFreedom, NodalDegreeOfFreedom, Strain
from ..kernel.keyed import KeyedMatrix
from ..kernel.stiffness import StiffnessMatrix
from .builder import ElementStiffnessMatrixBuilder

MEMBRANE_STRAINS = [Strain.LINEAR_STRAIN_X, Strain.LINEAR_STRAIN_Y, Strain.SHEAR_STRAIN_XY]

# Natural coordinates of the quadrilateral corners, counter-clockwise
QUAD_CORNERS = np.array([
    [-1.0, -1.0],
    [ 1.0, -1.0],
    [ 1.0,  1.0],
    [-1.0,  1.0],
])


def plane_stress_matrix(material) -> np.ndarray:
    E = material.youngs_modulus
    nu = material.poissons_ratio
    return (E / (1.0 - nu * nu)) * np.array([
        [1.0, nu, 0.0],
        [nu, 1.0, 0.0],
        [0.0, 0.0, (1.0 - nu) / 2.0],
    ])


def membrane_b_matrix(dN_dx: np.ndarray, dN_dy: np.ndarray) -> np.ndarray:
    """3 × 2n strain-displacement matrix from shape function gradients."""
    n = len(dN_dx)
    B = np.zeros((3, 2 * n), dtype=float)
    B[0, 0::2] = dN_dx
    B[1, 1::2] = dN_dy
    B[2, 0::2] = dN_dy
    B[2, 1::2] = dN_dx
    return B


def quad_shape_functions(xi: float, eta: float) -> np.ndarray:
    return 0.25 * (1.0 + xi * QUAD_CORNERS[:, 0]) * (1.0 + eta * QUAD_CORNERS[:, 1])


def quad_shape_derivatives(xi: float, eta: float) -> Tuple[np.ndarray, np.ndarray]:
    """dN/dξ and dN/dη at (ξ, η)."""
    dN_dxi = 0.25 * QUAD_CORNERS[:, 0] * (1.0 + eta * QUAD_CORNERS[:, 1])
    dN_deta = 0.25 * QUAD_CORNERS[:, 1] * (1.0 + xi * QUAD_CORNERS[:, 0])
    return dN_dxi, dN_deta


class _MembraneBuilder(ElementStiffnessMatrixBuilder):
    """Shared plumbing: key layout and stiffness from a constant B matrix."""

    def _membrane_keys(self):
        return [
            NodalDegreeOfFreedom(node, dof)
            for node in self.element.nodes
            for dof in (DegreeOfFreedom.X, DegreeOfFreedom.Y)
        ]

    def _local_xy(self, points=None) -> np.ndarray:
        return self.element.local_coordinates(points, config=self.config)

    @abstractmethod
    def _b_matrix(self) -> np.ndarray:
        """Constant 3 × 2n B matrix in local coordinates."""

    @abstractmethod
    def _area(self) -> float:
        """In-plane area, validated against the degeneracy tolerance."""

    def local_stiffness_matrix(self) -> StiffnessMatrix:
        element = self.element
        B = self._b_matrix()
        D = plane_stress_matrix(element.material)
        block = element.thickness * self._area() * (B.T @ D @ B)
        return self._stiffness_from_block(self._membrane_keys(), block)

    def strain_displacement_matrix(self) -> KeyedMatrix:
        return KeyedMatrix(MEMBRANE_STRAINS, self._membrane_keys(), self._b_matrix())

    def _interpolation_matrix(self, N: np.ndarray) -> KeyedMatrix:
        values = np.zeros((2, 2 * len(N)), dtype=float)
        values[0, 0::2] = N
        values[1, 1::2] = N
        return KeyedMatrix([DegreeOfFreedom.X, DegreeOfFreedom.Y], self._membrane_keys(), values)


class LinearConstantStrainTriangleStiffnessMatrixBuilder(_MembraneBuilder):
    """
    Builder for LinearConstantStrainTriangle.

    With local corner coordinates (xi, yi) and cyclic (i, j, k):

        bi = yj - yk      ci = xk - xj      ai = xj yk - xk yj
        Ni = (ai + bi x + ci y) / 2A
    """

    def _coefficients(self):
        element = self.element
        xy = self._local_xy()
        edge1 = xy[1] - xy[0]
        edge2 = xy[2] - xy[0]
        A = 0.5 * (edge1[0] * edge2[1] - edge2[0] * edge1[1])
        # 2A = |edge1 × edge2|, compared relative to the edge lengths
        if 2.0 * A <= self.config.degeneracy_tolerance * np.linalg.norm(edge1) * np.linalg.norm(edge2):
            raise ValueError(f"{element!r} is degenerate: area {A:.3e} is negligible for its edge lengths")
        a = np.zeros(3)
        b = np.zeros(3)
        c = np.zeros(3)
        for i in range(3):
            j, k = (i + 1) % 3, (i + 2) % 3
            a[i] = xy[j, 0] * xy[k, 1] - xy[k, 0] * xy[j, 1]
            b[i] = xy[j, 1] - xy[k, 1]
            c[i] = xy[k, 0] - xy[j, 0]
        return a, b, c, A

    def _b_matrix(self) -> np.ndarray:
        _, b, c, A = self._coefficients()
        return membrane_b_matrix(b / (2.0 * A), c / (2.0 * A))

    def _area(self) -> float:
        return self._coefficients()[3]

    def shape_function_vector(self, location) -> KeyedMatrix:
        if location is None:
            raise ValueError("location must not be None")
        a, b, c, A = self._coefficients()
        x, y = self._local_xy([location])[0]
        N = (a + b * x + c * y) / (2.0 * A)
        return self._interpolation_matrix(N)


class LinearConstantStressQuadrilateralStiffnessMatrixBuilder(_MembraneBuilder):
    """
    Builder for LinearConstantStressQuadrilateral: bilinear isoparametric
    quadrilateral integrated with a single point at ξ = η = 0.
    """

    def _jacobian(self, xi: float, eta: float) -> np.ndarray:
        xy = self._local_xy()
        dN_dxi, dN_deta = quad_shape_derivatives(xi, eta)
        return np.array([
            [dN_dxi @ xy[:, 0], dN_dxi @ xy[:, 1]],
            [dN_deta @ xy[:, 0], dN_deta @ xy[:, 1]],
        ])

    def _area(self) -> float:
        """Half the cross product of the diagonals (nodes in perimeter order)."""
        xy = self._local_xy()
        d1 = xy[2] - xy[0]
        d2 = xy[3] - xy[1]
        return 0.5 * (d1[0] * d2[1] - d1[1] * d2[0])

    def _b_matrix(self) -> np.ndarray:
        J = self._jacobian(0.0, 0.0)
        det_J = float(np.linalg.det(J))
        # Relative to the squared size of J, so a collapsed row counts as degenerate too
        if det_J <= self.config.degeneracy_tolerance * float(np.sum(J * J)):
            raise ValueError(
                f"{self.element!r} has a degenerate or inverted Jacobian ({det_J:.3e}); "
                f"check that its nodes are ordered around the perimeter"
            )
        dN_dxi, dN_deta = quad_shape_derivatives(0.0, 0.0)
        dN_dx, dN_dy = np.linalg.solve(J, np.vstack([dN_dxi, dN_deta]))
        return membrane_b_matrix(dN_dx, dN_dy)

    def natural_coordinates(self, location) -> Tuple[float, float]:
        """
        Invert the isoparametric map by Newton iteration: find (ξ, η) whose
        image is the in-plane projection of `location`.

        Raises:
        -------
        ValueError
            If the iteration does not converge
        """
        xy = self._local_xy()
        target = self._local_xy([location])[0]
        scale = max(float(np.ptp(xy[:, 0])), float(np.ptp(xy[:, 1])), 1.0)
        natural = np.zeros(2)

        for _ in range(self.config.quadrilateral_newton_iterations):
            N = quad_shape_functions(*natural)
            residual = N @ xy - target
            if np.linalg.norm(residual) <= self.config.quadrilateral_newton_tolerance * scale:
                return float(natural[0]), float(natural[1])
            J = self._jacobian(*natural)
            natural = natural - np.linalg.solve(J.T, residual)

        raise ValueError(
            f"Could not map {location!r} into the natural coordinates of {self.element!r}"
        )

    def shape_function_vector(self, location) -> KeyedMatrix:
        if location is None:
            raise ValueError("location must not be None")
        xi, eta = self.natural_coordinates(location)
        return self._interpolation_matrix(quad_shape_functions(xi, eta))
