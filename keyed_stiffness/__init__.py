# keyed_stiffness - Keyed element stiffness kernel
"""
KEYED-STIFFNESS: Element Stiffness Addressed by (Node, DOF)
===========================================================

This package provides:
- Keyed matrices: numpy arrays addressed by domain keys
- Element models: springs, trusses, 1D/3D beams, membrane plates
- Stiffness builders: local stiffness -> rotation -> global stiffness,
  with singularity checks and revision-based caching
- A factory that picks the right builder for an element

ARCHITECTURE:
-------------
    kernel/         DOF vocabulary, keyed matrices, errors, dense assembly
    elements/       Nodes, materials, sections, element variants
    stiffness/      Builder protocol, rotation, family builders, factory
    config.py       Numerical settings

QUICK START:
------------
    from keyed_stiffness import (
        DegreeOfFreedom, FiniteElementNode, Material, CrossSection,
        LinearTruss, ElementStiffnessMatrixBuilderFactory,
    )

    a = FiniteElementNode(0, 0.0, 0.0, 0.0)
    b = FiniteElementNode(1, 2.0, 0.0, 0.0)
    bar = LinearTruss(a, b, Material(210e9), CrossSection(area=0.001))

    provider = ElementStiffnessMatrixBuilderFactory().create(bar)
    provider.global_stiffness_at(a, DegreeOfFreedom.X, b, DegreeOfFreedom.X)   # -EA/L
"""

from .config import CONFIG, KernelConfig
from .kernel import (
    DegreeOfFreedom,
    InvalidOperationError,
    KeyedMatrix,
    KeyedVector,
    KeyOrderMismatchError,
    NodalDegreeOfFreedom,
    NodalDOFIndex,
    NonSingularStiffnessError,
    NotInitializedError,
    StiffnessMatrix,
    Strain,
    UnregisteredElementError,
    assemble_global_K,
)
from .elements import (
    CrossSection,
    FiniteElementNode,
    Linear1DBeam,
    Linear3DBeam,
    LinearConstantSpring,
    LinearConstantStrainTriangle,
    LinearConstantStressQuadrilateral,
    LinearTruss,
    Material,
)
from .stiffness import ElementStiffnessMatrixBuilder, ElementStiffnessMatrixBuilderFactory, StiffnessProvider

__version__ = "0.1.0"
