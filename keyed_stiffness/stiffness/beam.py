# keyed_stiffness/stiffness/beam.py
"""
BEAM BUILDERS: Euler-Bernoulli Members
======================================

SIGN CONVENTION:
----------------
Right-handed local axes, x along the member. Rotations are positive about
their axis, so bending in the x-z plane uses θy = -dw/dx and bending in the
x-y plane uses θz = +dv/dx. With that convention the two bending blocks
differ only in the sign of their coupling terms:

    x-y plane (v, θz), I = Izz:            x-z plane (w, θy), I = Iyy:

    EI/L³ [ 12   6L  -12   6L ]            EI/L³ [ 12  -6L  -12  -6L ]
          [ 6L  4L²  -6L  2L² ]                  [-6L  4L²   6L  2L² ]
          [-12  -6L   12  -6L ]                  [-12   6L   12   6L ]
          [ 6L  2L²  -6L  4L² ]                  [-6L  2L²   6L  4L² ]

Transverse displacement is interpolated with the cubic Hermite functions

    H1 = 1 - 3ξ² + 2ξ³      H2 = L (ξ - 2ξ² + ξ³)
    H3 = 3ξ² - 2ξ³          H4 = L (-ξ² + ξ³)

and curvatures are their second derivatives, sampled at mid-span.
"""

from typing import Tuple

import numpy as np

from ..kernel.dof import ALL_DOFS, DegreeOfFreedom, NodalDegreeOfFreedom, Strain
from ..kernel.keyed import KeyedMatrix
from ..kernel.stiffness import StiffnessMatrix
from .builder import ElementStiffnessMatrixBuilder

X, Y, Z = DegreeOfFreedom.X, DegreeOfFreedom.Y, DegreeOfFreedom.Z
XX, YY, ZZ = DegreeOfFreedom.XX, DegreeOfFreedom.YY, DegreeOfFreedom.ZZ


def hermite(xi: float, L: float) -> Tuple[float, float, float, float]:
    return (
        1.0 - 3.0 * xi**2 + 2.0 * xi**3,
        L * (xi - 2.0 * xi**2 + xi**3),
        3.0 * xi**2 - 2.0 * xi**3,
        L * (-xi**2 + xi**3),
    )


def hermite_second_derivative(xi: float, L: float) -> Tuple[float, float, float, float]:
    """d²H/dx² of the Hermite functions (x = ξL)."""
    return (
        (-6.0 + 12.0 * xi) / L**2,
        (-4.0 + 6.0 * xi) / L,
        (6.0 - 12.0 * xi) / L**2,
        (-2.0 + 6.0 * xi) / L,
    )


def bending_block(EI: float, L: float, coupling_sign: float) -> np.ndarray:
    """
    4×4 bending stiffness on (w1, θ1, w2, θ2).

    coupling_sign = +1 for θ = +dw/dx (x-y plane), -1 for θ = -dw/dx (x-z plane).
    """
    s = coupling_sign
    L2 = L * L
    return (EI / L**3) * np.array([
        [ 12.0,     6.0*s*L,  -12.0,     6.0*s*L],
        [ 6.0*s*L,  4.0*L2,   -6.0*s*L,  2.0*L2 ],
        [-12.0,    -6.0*s*L,   12.0,    -6.0*s*L],
        [ 6.0*s*L,  2.0*L2,   -6.0*s*L,  4.0*L2 ],
    ], dtype=float)


class Linear1DBernoulliBeamStiffnessMatrixBuilder(ElementStiffnessMatrixBuilder):
    """
    Builder for Linear1DBeam: bending in the local x-z plane on
    (start, Z), (start, YY), (end, Z), (end, YY), with I = Iyy.
    """

    def _bending_keys(self):
        start, end = self.element.start, self.element.end
        return [
            NodalDegreeOfFreedom(start, Z), NodalDegreeOfFreedom(start, YY),
            NodalDegreeOfFreedom(end, Z), NodalDegreeOfFreedom(end, YY),
        ]

    def local_stiffness_matrix(self) -> StiffnessMatrix:
        element = self.element
        EI = element.material.youngs_modulus * element.cross_section.second_moment_of_area_yy
        block = bending_block(EI, element.length, coupling_sign=-1.0)
        return self._stiffness_from_block(self._bending_keys(), block)

    def shape_function_vector(self, location) -> KeyedMatrix:
        if location is None:
            raise ValueError("location must not be None")
        L = self.element.length
        xi = self.element.normalized_position(location, self.config)
        h1, h2, h3, h4 = hermite(xi, L)
        return KeyedMatrix.from_rows([Z], self._bending_keys(), [[h1, -h2, h3, -h4]])

    def strain_displacement_matrix(self) -> KeyedMatrix:
        """Curvature d²w/dx² at mid-span."""
        L = self.element.length
        d1, d2, d3, d4 = hermite_second_derivative(0.5, L)
        return KeyedMatrix.from_rows([Strain.CURVATURE_Y], self._bending_keys(), [[d1, -d2, d3, -d4]])


class Linear3DBernoulliBeamStiffnessMatrixBuilder(ElementStiffnessMatrixBuilder):
    """
    Builder for Linear3DBeam: the classic 12×12 space frame member.

    DOF order per node is (X, Y, Z, XX, YY, ZZ), which is also the key
    order of element.nodal_degrees_of_freedom, so the dense matrix maps
    one-to-one onto the keyed one.
    """

    def local_stiffness_matrix(self) -> StiffnessMatrix:
        element = self.element
        E = element.material.youngs_modulus
        G = element.material.shear_modulus
        section = element.cross_section
        L = element.length

        k = np.zeros((12, 12), dtype=float)

        # Axial: u at 0 and 6
        EA_L = E * section.area / L
        k[np.ix_([0, 6], [0, 6])] = EA_L * np.array([[1.0, -1.0], [-1.0, 1.0]])

        # Torsion: θx at 3 and 9
        GJ_L = G * section.polar_moment_of_inertia / L
        k[np.ix_([3, 9], [3, 9])] = GJ_L * np.array([[1.0, -1.0], [-1.0, 1.0]])

        # Bending in x-y plane: v, θz at 1, 5, 7, 11
        k[np.ix_([1, 5, 7, 11], [1, 5, 7, 11])] = bending_block(
            E * section.second_moment_of_area_zz, L, coupling_sign=1.0)

        # Bending in x-z plane: w, θy at 2, 4, 8, 10
        k[np.ix_([2, 4, 8, 10], [2, 4, 8, 10])] = bending_block(
            E * section.second_moment_of_area_yy, L, coupling_sign=-1.0)

        keys = [NodalDegreeOfFreedom(node, dof) for node in element.nodes for dof in ALL_DOFS]
        return self._stiffness_from_block(keys, k)

    def shape_function_vector(self, location) -> KeyedMatrix:
        """Rows X (linear), Y and Z (Hermite) over all twelve nodal DOFs."""
        if location is None:
            raise ValueError("location must not be None")
        element = self.element
        L = element.length
        xi = element.normalized_position(location, self.config)
        h1, h2, h3, h4 = hermite(xi, L)
        start, end = element.start, element.end

        N = KeyedMatrix([X, Y, Z], self.supported_nodal_dofs)
        N[X, NodalDegreeOfFreedom(start, X)] = 1.0 - xi
        N[X, NodalDegreeOfFreedom(end, X)] = xi

        N[Y, NodalDegreeOfFreedom(start, Y)] = h1
        N[Y, NodalDegreeOfFreedom(start, ZZ)] = h2
        N[Y, NodalDegreeOfFreedom(end, Y)] = h3
        N[Y, NodalDegreeOfFreedom(end, ZZ)] = h4

        N[Z, NodalDegreeOfFreedom(start, Z)] = h1
        N[Z, NodalDegreeOfFreedom(start, YY)] = -h2
        N[Z, NodalDegreeOfFreedom(end, Z)] = h3
        N[Z, NodalDegreeOfFreedom(end, YY)] = -h4
        return N

    def strain_displacement_matrix(self) -> KeyedMatrix:
        """Axial strain, both curvatures and the rate of twist, at mid-span."""
        element = self.element
        L = element.length
        d1, d2, d3, d4 = hermite_second_derivative(0.5, L)
        start, end = element.start, element.end

        B = KeyedMatrix(
            [Strain.LINEAR_STRAIN_X, Strain.CURVATURE_Y, Strain.CURVATURE_Z, Strain.TWIST_X],
            self.supported_nodal_dofs,
        )
        B[Strain.LINEAR_STRAIN_X, NodalDegreeOfFreedom(start, X)] = -1.0 / L
        B[Strain.LINEAR_STRAIN_X, NodalDegreeOfFreedom(end, X)] = 1.0 / L

        B[Strain.CURVATURE_Y, NodalDegreeOfFreedom(start, Z)] = d1
        B[Strain.CURVATURE_Y, NodalDegreeOfFreedom(start, YY)] = -d2
        B[Strain.CURVATURE_Y, NodalDegreeOfFreedom(end, Z)] = d3
        B[Strain.CURVATURE_Y, NodalDegreeOfFreedom(end, YY)] = -d4

        B[Strain.CURVATURE_Z, NodalDegreeOfFreedom(start, Y)] = d1
        B[Strain.CURVATURE_Z, NodalDegreeOfFreedom(start, ZZ)] = d2
        B[Strain.CURVATURE_Z, NodalDegreeOfFreedom(end, Y)] = d3
        B[Strain.CURVATURE_Z, NodalDegreeOfFreedom(end, ZZ)] = d4

        B[Strain.TWIST_X, NodalDegreeOfFreedom(start, XX)] = -1.0 / L
        B[Strain.TWIST_X, NodalDegreeOfFreedom(end, XX)] = 1.0 / L
        return B
