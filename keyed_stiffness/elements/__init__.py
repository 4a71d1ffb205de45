# keyed_stiffness/elements - Structural element definitions
"""
ELEMENTS: NODES, PROPERTIES AND ELEMENT VARIANTS
================================================

- LinearConstantSpring, LinearTruss: axial-only, X per node
- Linear1DBeam: planar bending, Z and YY per node
- Linear3DBeam: space frame member, all six DOFs per node
- LinearConstantStrainTriangle, LinearConstantStressQuadrilateral:
  plane stress membranes, X and Y per node

USAGE:
------
    from keyed_stiffness.elements import FiniteElementNode, Material, CrossSection, LinearTruss

    n0 = FiniteElementNode(0, 0.0, 0.0, 0.0)
    n1 = FiniteElementNode(1, 2.0, 0.0, 0.0)
    bar = LinearTruss(n0, n1, Material(210e9), CrossSection(area=0.001))
"""

from .model import (
    CrossSection,
    FiniteElement,
    FiniteElement1D,
    FiniteElement2D,
    FiniteElementNode,
    Linear1DBeam,
    Linear3DBeam,
    LinearConstantSpring,
    LinearConstantStrainTriangle,
    LinearConstantStressQuadrilateral,
    LinearTruss,
    Material,
)

__all__ = [
    'CrossSection', 'FiniteElement', 'FiniteElement1D', 'FiniteElement2D',
    'FiniteElementNode', 'Linear1DBeam', 'Linear3DBeam', 'LinearConstantSpring',
    'LinearConstantStrainTriangle', 'LinearConstantStressQuadrilateral',
    'LinearTruss', 'Material',
]
