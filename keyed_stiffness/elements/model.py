# keyed_stiffness/elements/model.py
"""
ELEMENT MODEL: Nodes, Properties and Finite Element Variants
============================================================

PURPOSE:
--------
This module defines the structural objects the stiffness builders work on:
- FiniteElementNode: a point in 3D space with a stable integer identity
- Material / CrossSection: opaque, immutable property values
- FiniteElement: base class carrying nodes, a local axis triad and a
  revision counter
- Six concrete element variants (spring, truss, 1D beam, 3D beam,
  constant strain triangle, constant stress quadrilateral)

REVISIONS:
----------
Elements are MUTABLE: a designer can swap a material, move an end node or
change a plate thickness. Every such change bumps `element.revision`, a
monotonically increasing integer. Builders remember the revision they last
built against; `element.is_dirty(revision)` tells them whether to rebuild.

    truss = LinearTruss(n0, n1, steel, section)
    r = truss.revision
    truss.material = aluminium
    truss.is_dirty(r)   # True

LOCAL AXES:
-----------
    1D elements:  x along start -> end
                  y = Z_global × x  (Y_global projected normal to x if the
                                     member is vertical)
                  z = x × y
    Planar:       x along node0 -> node1
                  z normal to the plane of node0, node1, node2
                  y = z × x
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

import numpy as np

from ..config import CONFIG, KernelConfig
from ..kernel.dof import ALL_DOFS, TRANSLATIONS, DegreeOfFreedom, NodalDegreeOfFreedom, nodal_dofs
from ..kernel.keyed import KeyedVector


@dataclass(frozen=True, order=True)
class FiniteElementNode:
    """
    A node (joint) in 3D space.

    Identity, equality, hashing and ordering use `id` only, so a node that
    is moved (replaced by a copy with new coordinates) still addresses the
    same rows and columns of every keyed matrix.

    Parameters:
    -----------
    id : int
        Unique identifier for this node
    x, y, z : float
        Coordinates in the global frame (meters)

    Examples:
    ---------
    >>> FiniteElementNode(0, 0.0, 0.0, 0.0) == FiniteElementNode(0, 5.0, 0.0, 0.0)
    True
    """
    id: int
    x: float = field(default=0.0, compare=False)
    y: float = field(default=0.0, compare=False)
    z: float = field(default=0.0, compare=False)

    def as_vector(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=float)

    def moved_to(self, x: float, y: float, z: float) -> "FiniteElementNode":
        return FiniteElementNode(self.id, x, y, z)

    def __repr__(self):
        return f"Node{self.id}({self.x:g}, {self.y:g}, {self.z:g})"


@dataclass(frozen=True)
class Material:
    """
    Linear elastic, isotropic material.

    Parameters:
    -----------
    youngs_modulus : float
        E (Pa). Steel ~210e9, aluminium ~70e9, timber ~10e9
    poissons_ratio : float
        nu, between -1 and 0.5
    density : float
        Mass density (kg/m³), informational
    """
    youngs_modulus: float
    poissons_ratio: float = 0.0
    density: float = 0.0

    def __post_init__(self):
        if self.youngs_modulus < 0.0:
            raise ValueError(f"youngs_modulus must be non-negative, got {self.youngs_modulus}")
        if not -1.0 < self.poissons_ratio <= 0.5:
            raise ValueError(f"poissons_ratio must be in (-1, 0.5], got {self.poissons_ratio}")

    @property
    def shear_modulus(self) -> float:
        return self.youngs_modulus / (2.0 * (1.0 + self.poissons_ratio))


@dataclass(frozen=True)
class CrossSection:
    """
    Constant member cross-section.

    Parameters:
    -----------
    area : float
        A (m²), axial stiffness EA/L
    second_moment_of_area_yy : float
        Iyy (m⁴), bending about local y (deflection along local z)
    second_moment_of_area_zz : float
        Izz (m⁴), bending about local z (deflection along local y)
    polar_moment_of_inertia : float
        J (m⁴), St Venant torsion constant
    """
    area: float
    second_moment_of_area_yy: float = 0.0
    second_moment_of_area_zz: float = 0.0
    polar_moment_of_inertia: float = 0.0

    def __post_init__(self):
        for name in ("area", "second_moment_of_area_yy",
                     "second_moment_of_area_zz", "polar_moment_of_inertia"):
            if getattr(self, name) < 0.0:
                raise ValueError(f"{name} must be non-negative, got {getattr(self, name)}")

    @classmethod
    def solid_rectangle(cls, width: float, height: float) -> "CrossSection":
        """
        Solid rectangle, `width` along local y and `height` along local z.

        The torsion constant uses Roark's approximation for a b x t section
        (b >= t): J = b t³ (1/3 - 0.21 (t/b) (1 - t⁴ / (12 b⁴))).
        """
        if width <= 0.0 or height <= 0.0:
            raise ValueError(f"Rectangle dimensions must be positive, got {width} x {height}")
        b, t = max(width, height), min(width, height)
        J = b * t**3 * (1.0 / 3.0 - 0.21 * (t / b) * (1.0 - t**4 / (12.0 * b**4)))
        return cls(
            area=width * height,
            second_moment_of_area_yy=width * height**3 / 12.0,
            second_moment_of_area_zz=height * width**3 / 12.0,
            polar_moment_of_inertia=J,
        )


def _unit(vector: np.ndarray, what: str) -> np.ndarray:
    length = float(np.linalg.norm(vector))
    if length <= 0.0:
        raise ValueError(f"Cannot build a local axis from a zero-length {what}")
    return vector / length


def is_nearly_parallel(a: np.ndarray, b: np.ndarray, tolerance: float) -> bool:
    """
    True if |a × b| <= tolerance × |a| |b|, i.e. the sine of the angle
    between a and b is below `tolerance`. A zero vector is parallel to anything.
    """
    return float(np.linalg.norm(np.cross(a, b))) <= tolerance * float(np.linalg.norm(a) * np.linalg.norm(b))


class FiniteElement(ABC):
    """
    Base class for all finite elements.

    Subclasses declare which local degrees of freedom carry stiffness
    (`is_supported_dof`) and how the local axis triad is derived from the
    nodes (`local_axes`). Stiffness matrices are always keyed by
    `nodal_degrees_of_freedom`: every node crossed with all six DOFs.
    """

    def __init__(self, nodes: Sequence[FiniteElementNode]):
        nodes = list(nodes)
        for position, node in enumerate(nodes):
            if node is None:
                raise ValueError(f"{type(self).__name__} node {position} must not be None")
        if len(set(nodes)) != len(nodes):
            raise ValueError(f"{type(self).__name__} nodes must be distinct, got {nodes!r}")
        self._nodes: List[FiniteElementNode] = nodes
        self._revision = 0

    # ------------------------------------------------------------------
    # State tracking
    # ------------------------------------------------------------------

    @property
    def revision(self) -> int:
        """Monotonically increasing counter, bumped by every geometry/property change."""
        return self._revision

    def is_dirty(self, revision: int) -> bool:
        return revision != self._revision

    def _changed(self) -> None:
        self._revision += 1

    # ------------------------------------------------------------------
    # Topology
    # ------------------------------------------------------------------

    @property
    def nodes(self) -> Tuple[FiniteElementNode, ...]:
        return tuple(self._nodes)

    def replace_node(self, old: FiniteElementNode, new: FiniteElementNode) -> None:
        """Swap one node for another (e.g. a moved copy). Counts as a geometry change."""
        if new is None:
            raise ValueError("new node must not be None")
        position = self._nodes.index(old)
        others = self._nodes[:position] + self._nodes[position + 1:]
        if new in others:
            raise ValueError(f"{new!r} is already a node of this element")
        self._nodes[position] = new
        self._changed()

    @abstractmethod
    def is_supported_dof(self, degree_of_freedom: DegreeOfFreedom) -> bool:
        """True if the element carries stiffness in this local degree of freedom."""

    @property
    def supported_dofs(self) -> Tuple[DegreeOfFreedom, ...]:
        return tuple(dof for dof in ALL_DOFS if self.is_supported_dof(dof))

    @property
    def nodal_degrees_of_freedom(self) -> List[NodalDegreeOfFreedom]:
        return nodal_dofs(self._nodes, ALL_DOFS)

    # ------------------------------------------------------------------
    # Local frame
    # ------------------------------------------------------------------

    @abstractmethod
    def local_axes(self, config: Optional[KernelConfig] = None) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """
        Unit local x, y, z axes expressed in the global frame.

        `config` supplies the geometric tolerances (defaults to the global CONFIG).
        """

    @property
    def local_x_axis(self) -> KeyedVector:
        return KeyedVector(TRANSLATIONS, self.local_axes()[0])

    @property
    def local_y_axis(self) -> KeyedVector:
        return KeyedVector(TRANSLATIONS, self.local_axes()[1])

    @property
    def local_z_axis(self) -> KeyedVector:
        return KeyedVector(TRANSLATIONS, self.local_axes()[2])

    def __repr__(self):
        node_ids = ", ".join(str(node.id) for node in self._nodes)
        return f"{type(self).__name__}(nodes=[{node_ids}])"


class FiniteElement1D(FiniteElement):
    """A two-node line element (spring, truss or beam)."""

    def __init__(self, start: FiniteElementNode, end: FiniteElementNode):
        super().__init__([start, end])

    @property
    def start(self) -> FiniteElementNode:
        return self._nodes[0]

    @start.setter
    def start(self, node: FiniteElementNode) -> None:
        self.replace_node(self._nodes[0], node)

    @property
    def end(self) -> FiniteElementNode:
        return self._nodes[1]

    @end.setter
    def end(self, node: FiniteElementNode) -> None:
        self.replace_node(self._nodes[1], node)

    @property
    def length(self) -> float:
        return float(np.linalg.norm(self.end.as_vector() - self.start.as_vector()))

    def local_axes(self, config: Optional[KernelConfig] = None) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        config = config if config is not None else CONFIG
        delta = self.end.as_vector() - self.start.as_vector()
        if np.linalg.norm(delta) <= 0.0:
            raise ValueError(
                f"{self!r} has zero length (nodes {self.start.id} and {self.end.id} "
                f"at same location: ({self.start.x}, {self.start.y}, {self.start.z}))"
            )
        x_axis = _unit(delta, "element")
        global_z = np.array([0.0, 0.0, 1.0])
        if abs(float(np.dot(x_axis, global_z))) > 1.0 - config.parallel_tolerance:
            # Vertical member: global Y with its component along x removed
            global_y = np.array([0.0, 1.0, 0.0])
            y_axis = _unit(global_y - np.dot(global_y, x_axis) * x_axis, "element")
        else:
            y_axis = _unit(np.cross(global_z, x_axis), "element")
        z_axis = np.cross(x_axis, y_axis)
        return x_axis, y_axis, z_axis

    def axial_position(self, location: FiniteElementNode) -> float:
        """Distance of `location` from the start node, projected onto the element axis."""
        x_axis = self.local_axes()[0]
        return float(np.dot(location.as_vector() - self.start.as_vector(), x_axis))

    def distance_from_axis(self, location: FiniteElementNode) -> float:
        """Perpendicular distance of `location` from the (infinite) element axis."""
        x_axis = self.local_axes()[0]
        offset = location.as_vector() - self.start.as_vector()
        return float(np.linalg.norm(offset - np.dot(offset, x_axis) * x_axis))

    def normalized_position(self, location: FiniteElementNode, config: Optional[KernelConfig] = None) -> float:
        """
        ξ = axial_position / length of a point on the element axis
        (0 at the start node, 1 at the end node).

        Raises:
        -------
        ValueError
            If `location` lies farther than off_axis_tolerance × length from the axis
        """
        config = config if config is not None else CONFIG
        length = self.length
        distance = self.distance_from_axis(location)
        if distance > config.off_axis_tolerance * length:
            raise ValueError(
                f"{location!r} is {distance:.3e} m off the axis of {self!r}; "
                f"shape functions are only defined along the member"
            )
        return self.axial_position(location) / length


class FiniteElement2D(FiniteElement):
    """A planar element whose first three nodes define its plane."""

    def local_axes(self, config: Optional[KernelConfig] = None) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        config = config if config is not None else CONFIG
        p0, p1, p2 = (node.as_vector() for node in self._nodes[:3])
        x_axis = _unit(p1 - p0, f"edge between nodes {self._nodes[0].id} and {self._nodes[1].id}")
        if is_nearly_parallel(p1 - p0, p2 - p0, config.degeneracy_tolerance):
            raise ValueError(f"{self!r} is degenerate: its first three nodes are collinear")
        normal = np.cross(p1 - p0, p2 - p0)
        z_axis = _unit(normal, "plane normal")
        y_axis = np.cross(z_axis, x_axis)
        return x_axis, y_axis, z_axis

    def local_coordinates(self, points: Sequence[FiniteElementNode] = None,
                          config: Optional[KernelConfig] = None) -> np.ndarray:
        """
        In-plane (x, y) coordinates relative to node 0, shape (n, 2).
        Out-of-plane components are discarded.
        """
        points = self._nodes if points is None else points
        x_axis, y_axis, _ = self.local_axes(config)
        origin = self._nodes[0].as_vector()
        offsets = np.array([p.as_vector() - origin for p in points])
        return np.column_stack([offsets @ x_axis, offsets @ y_axis])


class _HasMaterialAndSection:
    """Mixin for line elements with a material and a constant cross-section."""

    @property
    def material(self) -> Material:
        return self._material

    @material.setter
    def material(self, material: Material) -> None:
        if material is None:
            raise ValueError("material must not be None")
        self._material = material
        self._changed()

    @property
    def cross_section(self) -> CrossSection:
        return self._cross_section

    @cross_section.setter
    def cross_section(self, cross_section: CrossSection) -> None:
        if cross_section is None:
            raise ValueError("cross_section must not be None")
        self._cross_section = cross_section
        self._changed()


class _HasMaterialAndThickness:
    """Mixin for planar elements with a material and a uniform thickness."""

    @property
    def material(self) -> Material:
        return self._material

    @material.setter
    def material(self, material: Material) -> None:
        if material is None:
            raise ValueError("material must not be None")
        self._material = material
        self._changed()

    @property
    def thickness(self) -> float:
        return self._thickness

    @thickness.setter
    def thickness(self, thickness: float) -> None:
        if thickness <= 0.0:
            raise ValueError(f"thickness must be positive, got {thickness}")
        self._thickness = float(thickness)
        self._changed()


# ----------------------------------------------------------------------
# Element variants
# ----------------------------------------------------------------------

class LinearConstantSpring(FiniteElement1D):
    """
    Axial spring with a directly specified stiffness (N/m).
    Carries force along its own axis only.
    """

    def __init__(self, start: FiniteElementNode, end: FiniteElementNode, spring_constant: float):
        super().__init__(start, end)
        self._spring_constant = float(spring_constant)

    @property
    def spring_constant(self) -> float:
        return self._spring_constant

    @spring_constant.setter
    def spring_constant(self, value: float) -> None:
        self._spring_constant = float(value)
        self._changed()

    @property
    def axial_stiffness(self) -> float:
        return self._spring_constant

    def is_supported_dof(self, degree_of_freedom: DegreeOfFreedom) -> bool:
        return degree_of_freedom is DegreeOfFreedom.X


class LinearTruss(_HasMaterialAndSection, FiniteElement1D):
    """
    Axial-only bar (rod) with constant cross-section: k = EA/L.
    """

    def __init__(self, start: FiniteElementNode, end: FiniteElementNode,
                 material: Material, cross_section: CrossSection):
        super().__init__(start, end)
        if material is None or cross_section is None:
            raise ValueError("LinearTruss needs a material and a cross_section")
        self._material = material
        self._cross_section = cross_section

    @property
    def axial_stiffness(self) -> float:
        return self._material.youngs_modulus * self._cross_section.area / self.length

    def is_supported_dof(self, degree_of_freedom: DegreeOfFreedom) -> bool:
        return degree_of_freedom is DegreeOfFreedom.X


class Linear1DBeam(_HasMaterialAndSection, FiniteElement1D):
    """
    Euler-Bernoulli beam bending in the local x-z plane only:
    transverse displacement Z and rotation YY at each node.
    """

    def __init__(self, start: FiniteElementNode, end: FiniteElementNode,
                 material: Material, cross_section: CrossSection):
        super().__init__(start, end)
        if material is None or cross_section is None:
            raise ValueError("Linear1DBeam needs a material and a cross_section")
        self._material = material
        self._cross_section = cross_section

    def is_supported_dof(self, degree_of_freedom: DegreeOfFreedom) -> bool:
        return degree_of_freedom in (DegreeOfFreedom.Z, DegreeOfFreedom.YY)


class Linear3DBeam(_HasMaterialAndSection, FiniteElement1D):
    """
    Euler-Bernoulli space frame member: axial, torsion and biaxial bending,
    all six DOFs at each node.
    """

    def __init__(self, start: FiniteElementNode, end: FiniteElementNode,
                 material: Material, cross_section: CrossSection):
        super().__init__(start, end)
        if material is None or cross_section is None:
            raise ValueError("Linear3DBeam needs a material and a cross_section")
        self._material = material
        self._cross_section = cross_section

    def is_supported_dof(self, degree_of_freedom: DegreeOfFreedom) -> bool:
        return True


class LinearConstantStrainTriangle(_HasMaterialAndThickness, FiniteElement2D):
    """
    Three-node plane stress membrane (CST). In-plane X and Y at each node.
    """

    def __init__(self, node0: FiniteElementNode, node1: FiniteElementNode, node2: FiniteElementNode,
                 material: Material, thickness: float):
        super().__init__([node0, node1, node2])
        if material is None:
            raise ValueError("LinearConstantStrainTriangle needs a material")
        if thickness <= 0.0:
            raise ValueError(f"thickness must be positive, got {thickness}")
        self._material = material
        self._thickness = float(thickness)

    @property
    def area(self) -> float:
        xy = self.local_coordinates()
        (x0, y0), (x1, y1), (x2, y2) = xy
        return 0.5 * ((x1 - x0) * (y2 - y0) - (x2 - x0) * (y1 - y0))

    def is_supported_dof(self, degree_of_freedom: DegreeOfFreedom) -> bool:
        return degree_of_freedom in (DegreeOfFreedom.X, DegreeOfFreedom.Y)


class LinearConstantStressQuadrilateral(_HasMaterialAndThickness, FiniteElement2D):
    """
    Four-node plane stress membrane with stresses sampled at the centroid.
    Nodes are given in order around the perimeter. In-plane X and Y at each node.
    """

    def __init__(self, node0: FiniteElementNode, node1: FiniteElementNode,
                 node2: FiniteElementNode, node3: FiniteElementNode,
                 material: Material, thickness: float):
        super().__init__([node0, node1, node2, node3])
        if material is None:
            raise ValueError("LinearConstantStressQuadrilateral needs a material")
        if thickness <= 0.0:
            raise ValueError(f"thickness must be positive, got {thickness}")
        self._material = material
        self._thickness = float(thickness)

    @property
    def area(self) -> float:
        """Half the cross product of the diagonals (nodes in perimeter order)."""
        xy = self.local_coordinates()
        d1 = xy[2] - xy[0]
        d2 = xy[3] - xy[1]
        return 0.5 * (d1[0] * d2[1] - d1[1] * d2[0])

    def is_supported_dof(self, degree_of_freedom: DegreeOfFreedom) -> bool:
        return degree_of_freedom in (DegreeOfFreedom.X, DegreeOfFreedom.Y)
