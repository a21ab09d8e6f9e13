"""Error taxonomy for spherequad builds and walks."""


class SphereQuadError(Exception):
    """Base exception for all spherequad errors."""

    pass


class InvalidDimensionError(SphereQuadError, ValueError):
    """Grid side is zero, not a power of two, or not square."""

    pass


class SortVerificationError(SphereQuadError, RuntimeError):
    """A sorted window was found out of order along its axis."""

    pass


class TraversalLoopError(SphereQuadError, RuntimeError):
    """A hit/miss walk dead-ended or revisited more nodes than exist."""

    pass
