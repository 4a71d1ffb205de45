# keyed_stiffness/kernel/errors.py
"""Exceptions raised by the keyed matrices, stiffness builders and the builder factory."""


class KeyOrderMismatchError(ValueError):
    """Raised when two keyed matrices are combined whose key sequences do not line up."""
    pass


class UnregisteredElementError(ValueError):
    """Raised when no stiffness builder is registered for an element type."""
    pass


class InvalidOperationError(RuntimeError):
    """Raised when an object is used in a state that does not permit the operation."""
    pass


class NotInitializedError(InvalidOperationError):
    """Raised when a stiffness builder is used before it has been bound to an element."""
    pass


class NonSingularStiffnessError(InvalidOperationError):
    """
    Raised when the stiffness matrix of a single, unconstrained element is
    invertible. A free element must offer no resistance to rigid-body motion,
    so this always indicates a modelling or implementation defect.
    """

    def __init__(self, message: str, element=None, determinant: float = float("nan")):
        super().__init__(message)
        self.element = element
        self.determinant = determinant
