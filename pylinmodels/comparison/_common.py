"""
Common data types for model comparison.

Frozen payloads only; the computation lives in _criteria and solvers.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class FTestParams:
    """Nested-model F-test."""
    f_value: float
    p_value: float
    df_num: int           # k = df_reduced - df_full
    df_den: int           # df_full
    rss_full: float
    rss_reduced: float
    n_obs: int
    added_terms: tuple[str, ...]


@dataclass(frozen=True)
class ModelScores:
    """
    One model under every comparison metric.

    held_out_mse is NaN when no validation rows were given or the
    held-out design could not be built; n_validation is then 0.
    """
    adjusted_r2: float
    bic: float
    aic: float
    held_out_mse: float
    n_train: int
    n_validation: int
    n_params: int

    def as_dict(self) -> dict[str, float | int]:
        return {
            'adjusted_r2': self.adjusted_r2,
            'bic': self.bic,
            'aic': self.aic,
            'held_out_mse': self.held_out_mse,
            'n_train': self.n_train,
            'n_validation': self.n_validation,
            'n_params': self.n_params,
        }
