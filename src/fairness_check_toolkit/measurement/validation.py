"""Structural checks run before any metric is computed.

Each function either returns the normalized value or raises one of the
toolkit errors, so a fairness check fails fast and never returns a partially
built object.
"""

from collections.abc import Mapping
from numbers import Real
from typing import Any, Iterable, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from ..exceptions import ConfigError, DomainError, IncompatibilityError
from .model_evaluation import ModelEvaluation

DEFAULT_EPSILON = 0.1
DEFAULT_CUTOFF = 0.5


def _as_categorical(protected: Any) -> Tuple[pd.Categorical, bool]:
    # Always a copy, so later changes by the caller never reach a result.
    if isinstance(protected, pd.Categorical):
        return protected.copy(), False
    if isinstance(protected, pd.Series) and isinstance(
        protected.dtype, pd.CategoricalDtype
    ):
        return protected.array.copy(), False
    return pd.Categorical(np.asarray(protected)), True


def _matching_level(privileged: Any, levels: Sequence[Any]) -> Any:
    """Returns the non-string level numerically equal to ``privileged``, if any."""
    for level in levels:
        if isinstance(level, str):
            continue
        try:
            if level == privileged or float(level) == float(privileged):
                return level
        except (TypeError, ValueError):
            continue
    return None


def coerce_privileged(privileged: Any, protected: Any = None) -> Tuple[str, bool]:
    """Returns the privileged value as a string and whether it was converted.

    The value is matched against the raw levels of ``protected`` before
    conversion, so ``1``, ``1.0`` and ``"1"`` all name the same numeric level
    and take that level's string form.
    """
    levels = []
    if protected is not None:
        levels = list(_as_categorical(protected)[0].categories)

    if isinstance(privileged, str) and privileged in [str(lvl) for lvl in levels]:
        return privileged, False

    level = _matching_level(privileged, levels)
    if level is not None:
        name = str(level)
        return name, name != privileged

    if isinstance(privileged, str):
        return privileged, False
    return str(privileged), True


def coerce_protected(protected: Any) -> Tuple[pd.Categorical, bool]:
    """Returns a copy of the protected attribute as a categorical with string levels.

    Non-categorical input is converted, taking its sorted unique values as
    levels. Existing categories keep their order but are renamed to their
    string form when needed.

    Returns:
        The categorical and whether any conversion took place.
    """
    categorical, coerced = _as_categorical(protected)

    if not all(isinstance(level, str) for level in categorical.categories):
        categorical = categorical.rename_categories(
            [str(level) for level in categorical.categories]
        )
        coerced = True

    return categorical, coerced


def validate_privileged(privileged: str, protected: pd.Categorical) -> None:
    if privileged not in protected.categories:
        raise DomainError(
            f"privileged not in protected: '{privileged}' is not one of "
            f"{list(protected.categories)}"
        )


def validate_epsilon(epsilon: Any) -> float:
    """Returns epsilon, 0.1 when omitted.

    Raises:
        ConfigError: If epsilon is not a single real number.
    """
    if epsilon is None:
        return DEFAULT_EPSILON
    if isinstance(epsilon, (bool, np.bool_)) or not isinstance(epsilon, Real):
        raise ConfigError("epsilon must be a single numeric value")
    if np.isnan(epsilon):
        raise ConfigError("epsilon must be a single numeric value")
    return float(epsilon)


def _as_strings(protected: pd.Categorical) -> np.ndarray:
    values = pd.Series(np.asarray(protected, dtype=object))
    return values.fillna("").astype(str).to_numpy()


def same_protected(first: pd.Categorical, second: pd.Categorical) -> bool:
    """Element-wise equality of two protected vectors, order included."""
    if len(first) != len(second):
        return False
    return bool((_as_strings(first) == _as_strings(second)).all())


def validate_fairness_objects(
    fairness_objects: Sequence[Any], protected: pd.Categorical, privileged: str
) -> None:
    """Every merged fairness object must share protected vector and privileged.

    Raises:
        IncompatibilityError: On the first object that differs.
    """
    for fobject in fairness_objects:
        if not same_protected(fobject.protected, protected):
            raise IncompatibilityError(
                "fairness objects must share protected vector with the one "
                "passed to fairness_check"
            )
        if fobject.privileged != privileged:
            raise IncompatibilityError(
                "fairness objects must share privileged value with the one "
                f"passed to fairness_check ('{fobject.privileged}' != '{privileged}')"
            )


def validate_targets(
    evaluations: Sequence[ModelEvaluation], protected: pd.Categorical
) -> None:
    """All evaluations must be made on the same observations.

    Raises:
        IncompatibilityError: If ground truth differs in length or values
            between any two evaluations, or does not match the length of the
            protected vector.
    """
    reference = evaluations[0].y_true
    for evaluation in evaluations:
        if len(evaluation.y_true) != len(reference):
            raise IncompatibilityError(
                "target variable mismatch: all evaluations must have the same "
                f"number of observations ('{evaluation.label}' has "
                f"{len(evaluation.y_true)}, expected {len(reference)})"
            )
        if not np.array_equal(evaluation.y_true, reference):
            raise IncompatibilityError(
                "target variable mismatch: all evaluations must have the same "
                f"ground truth values ('{evaluation.label}' differs)"
            )

    if len(reference) != len(protected):
        raise IncompatibilityError(
            f"target variable mismatch: protected vector has {len(protected)} "
            f"observations but evaluations have {len(reference)}"
        )


def resolve_labels(
    evaluations: Sequence[ModelEvaluation],
    label: Optional[Iterable[str]],
    inherited_labels: Iterable[str],
) -> List[str]:
    """Returns the labels of the new evaluations.

    Labels default to each evaluation's own label. They must be unique among
    themselves and must not repeat a label of a merged fairness object.

    Raises:
        ConfigError: On a count mismatch or a duplicate label.
    """
    if label is None:
        labels = [evaluation.label for evaluation in evaluations]
    else:
        labels = [label] if isinstance(label, str) else [str(item) for item in label]
        if len(labels) != len(evaluations):
            raise ConfigError(
                f"number of labels ({len(labels)}) must equal number of "
                f"evaluations ({len(evaluations)})"
            )

    duplicates = sorted({item for item in labels if labels.count(item) > 1})
    if duplicates:
        raise ConfigError(
            f"duplicate label among evaluations: {', '.join(duplicates)}"
        )

    inherited_labels = list(inherited_labels)
    inherited_duplicates = sorted(
        {item for item in inherited_labels if inherited_labels.count(item) > 1}
    )
    if inherited_duplicates:
        raise ConfigError(
            f"duplicate label: {', '.join(inherited_duplicates)} used by more "
            "than one fairness object"
        )

    clashes = sorted(set(labels) & set(inherited_labels))
    if clashes:
        raise ConfigError(
            f"duplicate label: {', '.join(clashes)} already used in a fairness object"
        )

    return labels


def resolve_cutoff(cutoff: Any, group_levels: Sequence[str]) -> pd.Series:
    """Returns one cutoff per level, indexed by level.

    Accepts None (0.5 everywhere), a scalar, a sequence of length 1 or of the
    number of levels, or a mapping from level to cutoff covering every level.

    Raises:
        ConfigError: If cutoff is not numeric, outside [0, 1], or of the wrong
            length.
    """
    n_levels = len(group_levels)

    if cutoff is None:
        values = [DEFAULT_CUTOFF] * n_levels
    elif isinstance(cutoff, Mapping):
        mapping = {str(level): value for level, value in cutoff.items()}
        missing = [level for level in group_levels if level not in mapping]
        unknown = sorted(set(mapping) - set(group_levels))
        if missing or unknown:
            raise ConfigError(
                "cutoff mapping must name every subgroup exactly "
                f"(missing: {missing}, unknown: {unknown})"
            )
        values = [mapping[level] for level in group_levels]
    elif isinstance(cutoff, (str, bytes)):
        raise ConfigError("cutoff must be numeric scalar or vector")
    else:
        values = list(np.atleast_1d(np.asarray(cutoff, dtype=object)))

    if any(
        isinstance(value, (bool, np.bool_)) or not isinstance(value, Real)
        for value in values
    ):
        raise ConfigError("cutoff must be numeric scalar or vector")

    values = np.asarray(values, dtype=float)
    if np.isnan(values).any() or (values < 0).any() or (values > 1).any():
        raise ConfigError("cutoff must have values between 0 and 1")

    if len(values) == 1:
        values = np.repeat(values, n_levels)
    if len(values) != n_levels:
        raise ConfigError(
            f"cutoff must have length 1 or one value per subgroup ({n_levels})"
        )

    return pd.Series(values, index=pd.Index(list(group_levels), name="subgroup"))


def distinct_cutoff_count(cutoff: Any) -> int:
    """Number of distinct raw cutoff values, used to flag risky coercions."""
    if cutoff is None:
        return 0
    if isinstance(cutoff, (str, bytes)):
        return 1
    if isinstance(cutoff, Mapping):
        return len(set(cutoff.values()))
    try:
        return len(set(np.atleast_1d(np.asarray(cutoff, dtype=object)).tolist()))
    except TypeError:
        return 1
