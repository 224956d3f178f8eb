"""Integration tests for fairness_check."""

import logging

import pytest
import pandas as pd
import numpy as np
from sklearn.linear_model import LogisticRegression

from fairness_check_toolkit import (
    ConfigError,
    DomainError,
    FairnessObject,
    IncompatibilityError,
    ModelEvaluation,
    fairness_check,
)
from fairness_check_toolkit.measurement.fairness_check_table import (
    FAIRNESS_CHECK_METRICS,
)
from fairness_check_toolkit.measurement.fairness_metrics import PARITY_LOSS_NAMES


class TestFairnessCheck:
    """Test cases for fairness object creation."""

    @pytest.fixture
    def perfect_case(self):
        """Two subgroups, both classified perfectly at 0.5."""
        protected = ["male", "male", "female", "female"]
        evaluation = ModelEvaluation(
            label="perfect",
            y_true=np.array([1, 0, 1, 0]),
            y_prob=np.array([0.6, 0.4, 0.7, 0.3]),
        )
        return evaluation, protected

    @pytest.fixture
    def three_group_case(self):
        """Three subgroups with different error patterns."""
        protected = ["a"] * 4 + ["b"] * 4 + ["c"] * 4
        evaluation = ModelEvaluation(
            label="model",
            y_true=np.array([1, 1, 0, 0] * 3),
            y_prob=np.array(
                [0.9, 0.8, 0.2, 0.1, 0.9, 0.4, 0.6, 0.1, 0.9, 0.8, 0.7, 0.6]
            ),
        )
        return evaluation, protected

    @pytest.fixture
    def no_negatives_case(self):
        """Subgroup 'b' holds positives only."""
        protected = ["a", "a", "b", "b"]
        evaluation = ModelEvaluation(
            label="model",
            y_true=np.array([1, 0, 1, 1]),
            y_prob=np.array([0.9, 0.1, 0.8, 0.2]),
        )
        return evaluation, protected

    def test_perfect_classification(self, perfect_case):
        """Test that perfect classification gives zero parity loss everywhere."""
        evaluation, protected = perfect_case

        fobject = fairness_check(
            [evaluation], protected=protected, privileged="male", cutoff=0.5, verbose=False
        )

        assert isinstance(fobject, FairnessObject)
        assert (fobject.metric_data.loc["perfect"] == 0).all()
        assert fobject.metric_data.loc["perfect", "MCC_parity_loss"] == 0
        assert not fobject.created_na
        assert fobject.epsilon == 0.1

    def test_parity_loss_columns(self, three_group_case):
        """Test that parity loss has the thirteen named columns in order."""
        evaluation, protected = three_group_case

        fobject = fairness_check([evaluation], protected, "a", verbose=False)

        assert list(fobject.metric_data.columns) == list(PARITY_LOSS_NAMES)
        assert len(fobject.metric_data.columns) == 13
        assert list(fobject.metric_data.index) == ["model"]

    def test_stp_parity_loss(self, three_group_case):
        """Test STP parity loss against the per-subgroup rates."""
        evaluation, protected = three_group_case

        fobject = fairness_check([evaluation], protected, "a", verbose=False)
        groups = fobject.groups_data["model"]

        contributions = [
            abs(groups.loc[level, "STP"] - groups.loc["a", "STP"])
            for level in ["b", "c"]
        ]
        assert contributions == pytest.approx([0.0, 0.5])
        assert fobject.metric_data.loc["model", "STP_parity_loss"] == pytest.approx(
            sum(contributions)
        )

    def test_fairness_check_table(self, three_group_case):
        """Test row order, signed scores and omission of the privileged subgroup."""
        evaluation, protected = three_group_case

        fobject = fairness_check([evaluation], protected, "a", verbose=False)
        data = fobject.fairness_check_data

        assert list(data.columns) == ["score", "subgroup", "metric", "model"]
        assert len(data) == 5 * 2
        assert "a" not in set(data["subgroup"])
        assert list(data["subgroup"]) == ["b", "c"] * 5
        assert list(data["metric"]) == [
            description
            for description in FAIRNESS_CHECK_METRICS.values()
            for _ in range(2)
        ]
        assert list(data["score"]) == pytest.approx(
            [-0.5, 0.0, -0.5, -0.5, 0.5, 1.0, -0.5, -0.5, 0.0, 0.5]
        )
        assert set(data["model"]) == {"model"}

    def test_rows_per_metric(self, three_group_case):
        """Test n_levels - 1 rows per model and metric."""
        evaluation, protected = three_group_case

        fobject = fairness_check([evaluation], protected, "b", verbose=False)
        counts = fobject.fairness_check_data.groupby("metric").size()

        assert (counts == 2).all()

    def test_zero_denominator(self, no_negatives_case):
        """Test missing rates for a subgroup without negatives."""
        evaluation, protected = no_negatives_case

        fobject = fairness_check([evaluation], protected, "a", verbose=False)
        groups = fobject.groups_data["model"]

        assert np.isnan(groups.loc["b", "FPR"])
        assert np.isnan(groups.loc["b", "TNR"])
        assert np.isnan(fobject.metric_data.loc["model", "FPR_parity_loss"])
        assert np.isnan(fobject.metric_data.loc["model", "TNR_parity_loss"])
        assert fobject.metric_data.loc["model", "TPR_parity_loss"] == pytest.approx(0.5)
        assert fobject.created_na

    def test_missing_values_logged(self, no_negatives_case, caplog):
        """Test that missing values produce a single aggregate warning."""
        evaluation, protected = no_negatives_case

        with caplog.at_level(logging.WARNING, logger="fairness_check"):
            fairness_check([evaluation], protected, "a", verbose=False)

        messages = [r.getMessage() for r in caplog.records]
        assert messages.count("Some metrics produced missing values") == 1

    def test_per_level_cutoff(self, perfect_case):
        """Test that a mapping cutoff is applied per subgroup."""
        evaluation, protected = perfect_case

        fobject = fairness_check(
            [evaluation],
            protected,
            "male",
            cutoff={"male": 0.5, "female": 0.8},
            verbose=False,
        )

        assert fobject.groups_data["perfect"].loc["female", "TPR"] == 0
        assert fobject.metric_data.loc["perfect", "TPR_parity_loss"] == 1
        assert fobject.cutoff["perfect"].to_dict() == {"female": 0.8, "male": 0.5}

    def test_scalar_cutoff_broadcast(self, three_group_case):
        """Test that a scalar cutoff is stored once per level."""
        evaluation, protected = three_group_case

        fobject = fairness_check([evaluation], protected, "a", cutoff=0.3, verbose=False)

        assert list(fobject.cutoff["model"].index) == ["a", "b", "c"]
        assert list(fobject.cutoff["model"]) == [0.3, 0.3, 0.3]

    def test_cutoff_length_mismatch(self, perfect_case):
        """Test that three cutoffs for two subgroups fail."""
        evaluation, protected = perfect_case

        with pytest.raises(ConfigError):
            fairness_check(
                [evaluation], protected, "male", cutoff=[0.5, 0.5, 0.5], verbose=False
            )

    def test_cutoff_out_of_range(self, perfect_case):
        """Test that cutoffs outside [0, 1] fail."""
        evaluation, protected = perfect_case

        with pytest.raises(ConfigError):
            fairness_check([evaluation], protected, "male", cutoff=1.2, verbose=False)

    def test_privileged_not_in_protected(self, perfect_case):
        """Test that an unknown privileged value fails."""
        evaluation, protected = perfect_case

        with pytest.raises(DomainError):
            fairness_check([evaluation], protected, "other", verbose=False)

    def test_invalid_epsilon(self, perfect_case):
        """Test that epsilon must be a single number."""
        evaluation, protected = perfect_case

        with pytest.raises(ConfigError):
            fairness_check(
                [evaluation], protected, "male", epsilon=[0.1, 0.2], verbose=False
            )
        with pytest.raises(ConfigError):
            fairness_check([evaluation], protected, "male", epsilon="0.1", verbose=False)

    def test_custom_epsilon(self, perfect_case):
        """Test that epsilon is stored on the object."""
        evaluation, protected = perfect_case

        fobject = fairness_check(
            [evaluation], protected, "male", epsilon=0.05, verbose=False
        )
        assert fobject.epsilon == 0.05

    def test_duplicate_labels(self, perfect_case):
        """Test that two evaluations sharing a label fail."""
        evaluation, protected = perfect_case
        twin = ModelEvaluation("perfect", evaluation.y_true, evaluation.y_prob)

        with pytest.raises(ConfigError):
            fairness_check([evaluation, twin], protected, "male", verbose=False)

    def test_explicit_labels(self, perfect_case):
        """Test that explicit labels override evaluation labels."""
        evaluation, protected = perfect_case
        twin = ModelEvaluation("perfect", evaluation.y_true, evaluation.y_prob)

        fobject = fairness_check(
            [evaluation, twin], protected, "male", label=["first", "second"], verbose=False
        )

        assert fobject.label == ("first", "second")
        assert [e.label for e in fobject.evaluations] == ["first", "second"]
        assert set(fobject.fairness_check_data["model"]) == {"first", "second"}

    def test_label_count_mismatch(self, perfect_case):
        """Test that the number of labels must match the evaluations."""
        evaluation, protected = perfect_case

        with pytest.raises(ConfigError):
            fairness_check(
                [evaluation], protected, "male", label=["a", "b"], verbose=False
            )

    def test_target_mismatch(self, perfect_case):
        """Test that evaluations on different ground truth fail."""
        evaluation, protected = perfect_case
        other = ModelEvaluation("other", np.array([1, 1, 1, 0]), evaluation.y_prob)

        with pytest.raises(IncompatibilityError):
            fairness_check([evaluation, other], protected, "male", verbose=False)

    def test_protected_length_mismatch(self, perfect_case):
        """Test that the protected vector must match the observations."""
        evaluation, _ = perfect_case

        with pytest.raises(IncompatibilityError):
            fairness_check([evaluation], ["male", "female"], "male", verbose=False)

    def test_no_evaluations(self):
        """Test that at least one evaluation is required."""
        with pytest.raises(ConfigError):
            fairness_check([], ["a", "b"], "a", verbose=False)

    def test_numeric_protected_and_privileged(self):
        """Test coercion of numeric protected values and privileged."""
        evaluation = ModelEvaluation(
            "model", np.array([1, 0, 1, 0]), np.array([0.6, 0.4, 0.7, 0.3])
        )

        fobject = fairness_check(
            [evaluation], np.array([1, 1, 0, 0]), privileged=1, verbose=False
        )

        assert fobject.privileged == "1"
        assert fobject.group_levels == ["0", "1"]
        assert isinstance(fobject.protected, pd.Categorical)

    @pytest.mark.parametrize(
        "protected, privileged, expected",
        [
            ([1, 1, 0, 0], 1.0, "1"),
            ([1.0, 1.0, 0.0, 0.0], 1, "1.0"),
            (pd.Series([1.0, 1.0, 0.0, 0.0]), "1", "1.0"),
        ],
    )
    def test_numeric_privileged_matches_level(self, protected, privileged, expected):
        """Test that integer and float spellings of a level are accepted."""
        evaluation = ModelEvaluation(
            "model", np.array([1, 0, 1, 0]), np.array([0.6, 0.4, 0.7, 0.3])
        )

        fobject = fairness_check(
            [evaluation], protected, privileged=privileged, verbose=False
        )

        assert fobject.privileged == expected
        assert expected in fobject.group_levels

    def test_result_independent_of_caller_inputs(self, perfect_case):
        """Test that changing the inputs afterwards leaves the result intact."""
        _, protected = perfect_case
        categorical = pd.Categorical(protected)
        y_prob = np.array([0.6, 0.4, 0.7, 0.3])
        evaluation = ModelEvaluation("model", np.array([1, 0, 1, 0]), y_prob)

        fobject = fairness_check([evaluation], categorical, "male", verbose=False)
        categorical[0] = "female"
        y_prob[0] = 0.0

        assert list(fobject.protected) == protected
        assert fobject.evaluations[0].y_prob[0] == 0.6

    def test_categorical_level_order_kept(self, three_group_case):
        """Test that categorical input keeps its level order."""
        evaluation, protected = three_group_case
        categorical = pd.Categorical(protected, categories=["c", "b", "a"])

        fobject = fairness_check([evaluation], categorical, "a", verbose=False)

        assert fobject.group_levels == ["c", "b", "a"]
        assert list(fobject.fairness_check_data["subgroup"][:2]) == ["c", "b"]

    def test_verbose_trace(self, no_negatives_case, capsys):
        """Test the creation trace printed in verbose mode."""
        evaluation, protected = no_negatives_case

        fairness_check([evaluation], protected, "a", verbose=True, colorize=False)

        captured = capsys.readouterr()
        assert "Creating fairness object" in captured.out
        assert "changed to categorical" in captured.out
        assert "NA created" in captured.out
        assert "Fairness object created successfully" in captured.out

    def test_silent_when_not_verbose(self, perfect_case, capsys):
        """Test that verbose=False prints nothing."""
        evaluation, protected = perfect_case

        fairness_check([evaluation], protected, "male", verbose=False)

        assert capsys.readouterr().out == ""

    def test_coercion_with_multiple_cutoffs_warns(self, perfect_case, caplog, capsys):
        """Test the stronger advisory when coercion meets several cutoffs."""
        evaluation, protected = perfect_case

        with caplog.at_level(logging.WARNING, logger="fairness_check"):
            fairness_check(
                [evaluation],
                protected,
                "male",
                cutoff=[0.4, 0.6],
                verbose=True,
                colorize=False,
            )

        assert "check if levels match cutoff values" in capsys.readouterr().out
        assert any("cutoff" in r.getMessage() for r in caplog.records)

    def test_colorize_does_not_change_results(self, three_group_case, capsys):
        """Test that console options leave computed values untouched."""
        evaluation, protected = three_group_case

        plain = fairness_check([evaluation], protected, "a", verbose=True, colorize=False)
        colored = fairness_check([evaluation], protected, "a", verbose=True, colorize=True)
        capsys.readouterr()

        pd.testing.assert_frame_equal(plain.metric_data, colored.metric_data)
        pd.testing.assert_frame_equal(
            plain.fairness_check_data, colored.fairness_check_data
        )

    def test_from_estimator(self):
        """Test building evaluations from a fitted scikit-learn classifier."""
        rng = np.random.default_rng(0)
        X = pd.DataFrame({"x1": rng.normal(size=200), "x2": rng.normal(size=200)})
        y = (X["x1"] + rng.normal(scale=0.5, size=200) > 0).astype(int)
        protected = rng.choice(["A", "B"], size=200)

        model = LogisticRegression().fit(X, y)
        evaluation = ModelEvaluation.from_estimator(model, X, y)

        fobject = fairness_check([evaluation], protected, "A", verbose=False)

        assert fobject.label == ("LogisticRegression",)
        assert len(fobject.fairness_check_data) == 5


class TestModelEvaluation:
    """Test cases for evaluation input validation."""

    def test_length_mismatch(self):
        """Test that y_true and y_prob must have equal length."""
        with pytest.raises(ConfigError):
            ModelEvaluation("m", np.array([1, 0]), np.array([0.5]))

    def test_non_binary_target(self):
        """Test that y_true must hold 0 and 1 only."""
        with pytest.raises(ConfigError):
            ModelEvaluation("m", np.array([1, 2]), np.array([0.5, 0.5]))

    def test_probabilities_out_of_range(self):
        """Test that y_prob must be within [0, 1]."""
        with pytest.raises(ConfigError):
            ModelEvaluation("m", np.array([1, 0]), np.array([0.5, 1.5]))

    def test_boolean_target(self):
        """Test that boolean ground truth is accepted."""
        evaluation = ModelEvaluation("m", np.array([True, False]), [0.2, 0.8])

        assert list(evaluation.y_true) == [1, 0]
        assert len(evaluation) == 2

    def test_estimator_without_probabilities(self):
        """Test that estimators without predict_proba are rejected."""
        with pytest.raises(ConfigError):
            ModelEvaluation.from_estimator(object(), None, [1, 0])
