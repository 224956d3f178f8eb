"""Error taxonomy for fairness checks.

All errors derive from ValueError so that call sites catching ValueError, as
the configuration layer does, keep working. Each one is fatal to the current
invocation: no partially built fairness object is ever returned.
"""


class FairnessCheckError(ValueError):
    """Base class for every failure raised while building a fairness object."""


class ConfigError(FairnessCheckError):
    """Malformed call-site arguments such as epsilon, cutoff or labels."""


class DomainError(FairnessCheckError):
    """The privileged value is not a level of the protected attribute."""


class IncompatibilityError(FairnessCheckError):
    """Evaluations or fairness objects that cannot be compared or merged.

    Raised for mismatched protected vectors, privileged values or ground truth.
    """
