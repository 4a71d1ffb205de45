# keyed_stiffness/stiffness - Element stiffness builders
"""
STIFFNESS: FROM ELEMENT TO GLOBAL STIFFNESS MATRIX
==================================================

- ElementStiffnessMatrixBuilder: shared build/rotate/validate/cache protocol
- StiffnessProvider: the capability assembly code depends on
- One builder per element family (truss, beam, plate modules)
- ElementStiffnessMatrixBuilderFactory: picks the builder for an element

USAGE:
------
    from keyed_stiffness.stiffness import ElementStiffnessMatrixBuilderFactory

    provider = ElementStiffnessMatrixBuilderFactory().create(element)
    k_ax = provider.global_stiffness_at(n0, DegreeOfFreedom.X, n1, DegreeOfFreedom.X)
"""

from .builder import ElementStiffnessMatrixBuilder, StiffnessProvider, is_numerically_singular
from .rotation import element_rotation_matrix, expand_to_nodal_transform, rotation_matrix_from_axes
from .truss import LinearTrussStiffnessMatrixBuilder
from .beam import Linear1DBernoulliBeamStiffnessMatrixBuilder, Linear3DBernoulliBeamStiffnessMatrixBuilder
from .plate import (
    LinearConstantStrainTriangleStiffnessMatrixBuilder,
    LinearConstantStressQuadrilateralStiffnessMatrixBuilder,
)
from .factory import DEFAULT_REGISTRATIONS, ElementStiffnessMatrixBuilderFactory

__all__ = [
    'ElementStiffnessMatrixBuilder', 'StiffnessProvider', 'is_numerically_singular',
    'element_rotation_matrix', 'expand_to_nodal_transform', 'rotation_matrix_from_axes',
    'LinearTrussStiffnessMatrixBuilder',
    'Linear1DBernoulliBeamStiffnessMatrixBuilder', 'Linear3DBernoulliBeamStiffnessMatrixBuilder',
    'LinearConstantStrainTriangleStiffnessMatrixBuilder',
    'LinearConstantStressQuadrilateralStiffnessMatrixBuilder',
    'DEFAULT_REGISTRATIONS', 'ElementStiffnessMatrixBuilderFactory',
]
