"""Exceptions raised when the deduction engine detects an unsound state."""


class SolverError(RuntimeError):
    """Base class for fatal solver failures; never a normal game outcome."""


class ContradictionError(SolverError):
    """Two facts make incompatible claims about the same cells."""


class InvariantViolationError(SolverError):
    """A fact or an applied action broke an invariant the solver relies on."""
