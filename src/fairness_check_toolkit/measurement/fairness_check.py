"""Creates fairness objects and merges them with earlier ones.

``fairness_check`` validates its inputs, computes each new model's rates and
parity loss independently, and finally concatenates the new results with the
contents of any fairness objects passed in. Earlier results are copied, never
recomputed, and new models always come first.
"""

from dataclasses import dataclass, replace
from typing import Any, Iterable, List, Optional, Sequence

import pandas as pd

from ..config.logging_config import VerboseConsole, get_check_logger
from ..exceptions import ConfigError, FairnessCheckError
from .confusion import group_matrices
from .fairness_check_table import build_fairness_check_table
from .fairness_metrics import PARITY_LOSS_NAMES, FairnessMetrics
from .fairness_object import FairnessObject
from .model_evaluation import ModelEvaluation
from .validation import (
    coerce_privileged,
    coerce_protected,
    distinct_cutoff_count,
    resolve_cutoff,
    resolve_labels,
    validate_epsilon,
    validate_fairness_objects,
    validate_privileged,
    validate_targets,
)

logger = get_check_logger("fairness_check")


@dataclass(frozen=True, eq=False)
class ModelFairnessResult:
    """Everything computed for one newly checked model.

    Attributes:
        evaluation: The evaluation input, carrying the resolved label.
        parity_loss: The thirteen parity-loss values.
        groups: Rates per subgroup (level x metric).
        fairness_check_data: This model's fairness check rows.
        cutoff: Threshold per level used for this model.
    """

    evaluation: ModelEvaluation
    parity_loss: pd.Series
    groups: pd.DataFrame
    fairness_check_data: pd.DataFrame
    cutoff: pd.Series

    @property
    def label(self) -> str:
        return self.evaluation.label

    @property
    def created_na(self) -> bool:
        return bool(self.parity_loss.isna().any())


def compute_model_fairness(
    evaluation: ModelEvaluation,
    protected: pd.Categorical,
    privileged: str,
    cutoff: pd.Series,
) -> ModelFairnessResult:
    """Computes one model's rates, parity loss and fairness check rows.

    Depends only on its arguments, so models can be processed in any order or
    in parallel.
    """
    matrices = group_matrices(protected, evaluation.y_prob, evaluation.y_true, cutoff)
    gmm = FairnessMetrics.group_metric_matrix(matrices)

    parity_loss = FairnessMetrics.parity_loss(gmm, privileged)
    parity_loss.name = evaluation.label

    return ModelFairnessResult(
        evaluation=evaluation,
        parity_loss=parity_loss,
        groups=gmm,
        fairness_check_data=build_fairness_check_table(
            gmm, privileged, evaluation.label
        ),
        cutoff=cutoff.copy(),
    )


def merge_results(
    results: Sequence[ModelFairnessResult],
    fairness_objects: Sequence[FairnessObject],
    protected: pd.Categorical,
    privileged: str,
    epsilon: float,
) -> FairnessObject:
    """Concatenates new results with earlier fairness objects.

    New models come first, followed by each fairness object's models in the
    order the objects were given. Protected vector, privileged level and
    epsilon are the ones of the current check.
    """
    metric_data = pd.DataFrame(
        [result.parity_loss for result in results], columns=list(PARITY_LOSS_NAMES)
    )
    metric_data = pd.concat(
        [metric_data] + [fobject.metric_data for fobject in fairness_objects]
    ).astype(float)
    metric_data.index.name = "model"

    fairness_check_data = pd.concat(
        [result.fairness_check_data for result in results]
        + [fobject.fairness_check_data for fobject in fairness_objects],
        ignore_index=True,
    )

    groups_data = {result.label: result.groups.copy() for result in results}
    cutoff = {result.label: result.cutoff.copy() for result in results}
    labels = [result.label for result in results]
    evaluations = [result.evaluation for result in results]

    for fobject in fairness_objects:
        for model_label in fobject.label:
            groups_data[model_label] = fobject.groups_data[model_label].copy()
            cutoff[model_label] = fobject.cutoff[model_label].copy()
        labels.extend(fobject.label)
        evaluations.extend(fobject.evaluations)

    return FairnessObject(
        metric_data=metric_data,
        groups_data=groups_data,
        fairness_check_data=fairness_check_data,
        evaluations=tuple(evaluations),
        privileged=privileged,
        protected=protected,
        label=tuple(labels),
        cutoff=cutoff,
        epsilon=epsilon,
        created_na=bool(metric_data.isna().to_numpy().any()),
    )


def fairness_check(
    evaluations: Iterable[ModelEvaluation],
    protected: Any,
    privileged: Any,
    fairness_objects: Iterable[FairnessObject] = (),
    cutoff: Any = None,
    label: Optional[Iterable[str]] = None,
    epsilon: Optional[float] = None,
    verbose: bool = True,
    colorize: bool = True,
) -> FairnessObject:
    """Measures fairness of new models and merges earlier fairness objects.

    For every new model and every level of the protected attribute, the
    thirteen confusion-matrix rates are computed at that level's cutoff.
    Parity loss is the sum over levels of the absolute difference between a
    level's rate and the privileged level's rate.

    Args:
        evaluations: New models to check, at least one.
        protected: Protected attribute, one value per observation.
        privileged: Level the other subgroups are compared to.
        fairness_objects: Earlier results to merge; they must share
            protected vector, privileged level and ground truth.
        cutoff: Threshold, as a scalar, one value per level, or a mapping
            from level to threshold. Defaults to 0.5 for every level.
        label: Labels overriding those of ``evaluations``.
        epsilon: Acceptable band (-epsilon, epsilon), 0.1 by default.
        verbose: Print the creation trace.
        colorize: Use terminal colors in the creation trace.

    Returns:
        A new FairnessObject holding the new models followed by the merged ones.

    Raises:
        ConfigError: On malformed evaluations, epsilon, cutoff or labels.
        DomainError: If ``privileged`` is not a level of ``protected``.
        IncompatibilityError: If protected vector, privileged level or ground
            truth differ between the inputs.
    """
    console = VerboseConsole(verbose=verbose, colorize=colorize)
    evaluations = list(evaluations)
    fairness_objects = list(fairness_objects)

    logger.log_stage_start(
        "fairness_check",
        {"n_models": len(evaluations), "n_fairness_objects": len(fairness_objects)},
    )
    logger.start_timer("fairness_check")

    try:
        (
            evaluations,
            protected,
            privileged,
            cutoffs,
            epsilon,
        ) = _validate_inputs(
            console,
            evaluations,
            protected,
            privileged,
            fairness_objects,
            cutoff,
            label,
            epsilon,
        )
    except FairnessCheckError as e:
        logger.log_error(f"Fairness check failed: {e}", e)
        raise

    console.write("-> Metric calculation\t\t: ")

    results = [
        compute_model_fairness(evaluation, protected, privileged, cutoffs)
        for evaluation in evaluations
    ]
    for result in results:
        logger.log_parity_loss(result.label, result.parity_loss.to_dict())

    if any(result.created_na for result in results):
        console.write("successful (")
        console.advise("NA created")
        console.write(")\n")
        logger.log_warning(
            "Some metrics produced missing values",
            {
                "stage": "metric_calculation",
                "models": [r.label for r in results if r.created_na],
            },
        )
    else:
        console.write("successful\n")

    fobject = merge_results(results, fairness_objects, protected, privileged, epsilon)

    console.ok("Fairness object created successfully\n")
    logger.log_stage_complete(
        "fairness_check",
        {
            "n_models": fobject.n_models,
            "created_na": fobject.created_na,
            "duration_ms": logger.end_timer("fairness_check"),
        },
    )

    return fobject


def _validate_inputs(
    console: VerboseConsole,
    evaluations: List[ModelEvaluation],
    protected: Any,
    privileged: Any,
    fairness_objects: List[FairnessObject],
    cutoff: Any,
    label: Optional[Iterable[str]],
    epsilon: Any,
):
    console.write("Creating fairness object\n")

    if not evaluations:
        raise ConfigError("at least one model evaluation is required")
    for evaluation in evaluations:
        if not isinstance(evaluation, ModelEvaluation):
            raise ConfigError(
                f"evaluations must be ModelEvaluation, got {type(evaluation).__name__}"
            )
    for fobject in fairness_objects:
        if not isinstance(fobject, FairnessObject):
            raise ConfigError(
                f"fairness_objects must be FairnessObject, got {type(fobject).__name__}"
            )

    console.write(f"-> Privileged subgroup\t\t: {type(privileged).__name__} (")
    privileged, privileged_changed = coerce_privileged(privileged, protected)
    if privileged_changed:
        console.advise("changed to str")
        logger.logger.info(
            "Privileged value changed to str",
            extra={"component": logger.component, "stage": "validation"},
        )
    else:
        console.ok("Ok")
    console.write(")\n")

    console.write(f"-> Protected variable\t\t: {type(protected).__name__} (")
    protected, protected_changed = coerce_protected(protected)
    if not protected_changed:
        console.ok("Ok")
    elif distinct_cutoff_count(cutoff) <= 1:
        console.advise("changed to categorical")
        logger.logger.info(
            "Protected variable changed to categorical",
            extra={"component": logger.component, "stage": "validation"},
        )
    else:
        console.alert("changed to categorical, check if levels match cutoff values")
        logger.log_warning(
            "Protected variable changed to categorical while cutoff has several "
            "values; check that levels match cutoff values",
            {"stage": "validation", "levels": list(protected.categories)},
        )
    console.write(")\n")

    validate_privileged(privileged, protected)
    epsilon = validate_epsilon(epsilon)

    console.write("-> Fairness objects\t\t: ")
    try:
        validate_fairness_objects(fairness_objects, protected, privileged)
    except FairnessCheckError:
        console.alert("not compatible\n")
        raise
    console.write("compatible\n")

    console.write("-> Checking evaluations\t\t: ")
    inherited = [ev for fobject in fairness_objects for ev in fobject.evaluations]
    try:
        validate_targets(evaluations + inherited, protected)
    except FairnessCheckError:
        console.alert("not equal\n")
        raise
    console.write("compatible\n")

    inherited_labels = [lbl for fobject in fairness_objects for lbl in fobject.label]
    labels = resolve_labels(evaluations, label, inherited_labels)
    evaluations = [
        evaluation if evaluation.label == model_label
        else replace(evaluation, label=model_label)
        for evaluation, model_label in zip(evaluations, labels)
    ]

    cutoffs = resolve_cutoff(cutoff, list(protected.categories))

    return evaluations, protected, privileged, cutoffs, epsilon
