# keyed_stiffness/kernel - Keyed linear algebra core
"""
KERNEL: KEYED INDEXING FOUNDATION
=================================

Everything an element builder needs to talk about stiffness in terms of
(node, degree of freedom) rather than integer positions:

- DegreeOfFreedom / NodalDegreeOfFreedom / Strain: the key vocabulary
- KeyedMatrix / KeyedVector: numpy arrays addressed by ordered keys
- StiffnessMatrix: keyed matrix over NodalDegreeOfFreedom keys
- NodalDOFIndex / assemble_global_K: scatter keyed element contributions
  into a dense global matrix
"""

from .dof import (
    ALL_DOFS,
    ROTATIONS,
    TRANSLATIONS,
    DegreeOfFreedom,
    NodalDegreeOfFreedom,
    Strain,
    nodal_dofs,
)
from .errors import (
    InvalidOperationError,
    KeyOrderMismatchError,
    NonSingularStiffnessError,
    NotInitializedError,
    UnregisteredElementError,
)
from .keyed import KeyedMatrix, KeyedVector
from .stiffness import StiffnessMatrix
from .assemble import NodalDOFIndex, assemble_global_K

__all__ = [
    'ALL_DOFS', 'ROTATIONS', 'TRANSLATIONS',
    'DegreeOfFreedom', 'NodalDegreeOfFreedom', 'Strain', 'nodal_dofs',
    'InvalidOperationError', 'KeyOrderMismatchError', 'NonSingularStiffnessError',
    'NotInitializedError', 'UnregisteredElementError',
    'KeyedMatrix', 'KeyedVector', 'StiffnessMatrix',
    'NodalDOFIndex', 'assemble_global_K',
]
