# keyed_stiffness/stiffness/factory.py
"""
BUILDER FACTORY: Element Type -> Stiffness Builder
==================================================

A closed, static lookup from element class to builder class, fixed when
the factory is constructed:

    LinearConstantSpring               -> LinearTrussStiffnessMatrixBuilder
    LinearTruss                        -> LinearTrussStiffnessMatrixBuilder
    Linear1DBeam                       -> Linear1DBernoulliBeamStiffnessMatrixBuilder
    Linear3DBeam                       -> Linear3DBernoulliBeamStiffnessMatrixBuilder
    LinearConstantStrainTriangle       -> LinearConstantStrainTriangleStiffnessMatrixBuilder
    LinearConstantStressQuadrilateral  -> LinearConstantStressQuadrilateralStiffnessMatrixBuilder

Lookup uses the EXACT runtime class of the element: a subclass of
LinearTruss is not served by the truss builder unless it is registered.
Adding an element family means writing its builder and registering it
(either here or through `extra_registrations`).

USAGE:
------
    factory = ElementStiffnessMatrixBuilderFactory()
    provider = factory.create(truss)
    provider.global_stiffness_at(n0, DegreeOfFreedom.X, n1, DegreeOfFreedom.X)
"""

import logging
from types import MappingProxyType
from typing import Mapping, Optional, Type

from ..config import KernelConfig
from ..elements.model import (
    FiniteElement,
    Linear1DBeam,
    Linear3DBeam,
    LinearConstantSpring,
    LinearConstantStrainTriangle,
    LinearConstantStressQuadrilateral,
    LinearTruss,
)
from ..kernel.errors import UnregisteredElementError
from .beam import Linear1DBernoulliBeamStiffnessMatrixBuilder, Linear3DBernoulliBeamStiffnessMatrixBuilder
from .builder import ElementStiffnessMatrixBuilder, StiffnessProvider
from .plate import (
    LinearConstantStrainTriangleStiffnessMatrixBuilder,
    LinearConstantStressQuadrilateralStiffnessMatrixBuilder,
)
from .truss import LinearTrussStiffnessMatrixBuilder

logger = logging.getLogger(__name__)

DEFAULT_REGISTRATIONS = MappingProxyType({
    LinearConstantSpring: LinearTrussStiffnessMatrixBuilder,
    LinearTruss: LinearTrussStiffnessMatrixBuilder,
    Linear1DBeam: Linear1DBernoulliBeamStiffnessMatrixBuilder,
    Linear3DBeam: Linear3DBernoulliBeamStiffnessMatrixBuilder,
    LinearConstantStrainTriangle: LinearConstantStrainTriangleStiffnessMatrixBuilder,
    LinearConstantStressQuadrilateral: LinearConstantStressQuadrilateralStiffnessMatrixBuilder,
})


class ElementStiffnessMatrixBuilderFactory:
    """
    Creates the right stiffness builder for an element.

    Parameters:
    -----------
    extra_registrations : Mapping[type, type], optional
        Additional element class -> builder class entries. They may override
        the defaults. Every builder must subclass ElementStiffnessMatrixBuilder.
    config : KernelConfig, optional
        Passed to every builder created (defaults to the global CONFIG)

    Raises:
    -------
    TypeError
        If an extra registration is not a class pair of the right kind
    """

    def __init__(
        self,
        extra_registrations: Optional[Mapping[Type[FiniteElement], Type[ElementStiffnessMatrixBuilder]]] = None,
        config: Optional[KernelConfig] = None,
    ):
        lookup = dict(DEFAULT_REGISTRATIONS)
        for element_type, builder_type in (extra_registrations or {}).items():
            if not isinstance(element_type, type):
                raise TypeError(f"Element type must be a class, got {element_type!r}")
            if not (isinstance(builder_type, type) and issubclass(builder_type, ElementStiffnessMatrixBuilder)):
                raise TypeError(
                    f"Builder for {element_type.__name__} must subclass "
                    f"ElementStiffnessMatrixBuilder, got {builder_type!r}"
                )
            lookup[element_type] = builder_type
        self._lookup = MappingProxyType(lookup)
        self._config = config
        logger.debug("Stiffness builder factory registered %d element types", len(self._lookup))

    @property
    def registrations(self) -> Mapping[type, type]:
        """Read-only view of the element -> builder mapping."""
        return self._lookup

    def is_registered(self, element_type: type) -> bool:
        return element_type in self._lookup

    def create(self, element) -> StiffnessProvider:
        """
        Build the stiffness builder registered for `type(element)`, bound to `element`.

        Raises:
        -------
        ValueError
            If element is None
        UnregisteredElementError
            If no builder is registered for the element's exact class
        """
        if element is None:
            raise ValueError("element must not be None")
        element_type = type(element)
        try:
            builder_type = self._lookup[element_type]
        except KeyError:
            raise UnregisteredElementError(
                f"ElementStiffnessMatrixBuilderFactory has not registered a builder for the "
                f"element type {element_type.__module__}.{element_type.__qualname__}"
            ) from None

        builder = builder_type(element, config=self._config)
        logger.debug("Created %s for %r", builder_type.__name__, element)
        return builder
