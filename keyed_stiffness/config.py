# keyed_stiffness/config.py
"""
Kernel configuration and defaults.
"""

from dataclasses import dataclass


@dataclass
class KernelConfig:
    """Numerical settings shared by the stiffness builders."""

    # Singularity invariant: |det(K)| <= singularity_rtol * prod(row norms of K)
    singularity_rtol: float = 1e-10
    check_singularity: bool = True

    # |x . Z| above 1 - parallel_tolerance means a 1D element is vertical
    parallel_tolerance: float = 1e-9

    # Relative: |a × b| <= degeneracy_tolerance * |a| |b| means a and b are parallel
    # (collinear plate nodes, vanishing CST area); a quadrilateral compares det J with |J|²
    degeneracy_tolerance: float = 1e-10

    # Relative to member length: farther than this from the axis is not on a 1D element
    off_axis_tolerance: float = 1e-6

    # Inverse isoparametric mapping for quadrilateral shape functions
    quadrilateral_newton_iterations: int = 25
    quadrilateral_newton_tolerance: float = 1e-12


# Global config instance
CONFIG = KernelConfig()
