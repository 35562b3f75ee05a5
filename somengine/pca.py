"""Principal component analysis used to seed a map along the data's main axes."""

import numpy as np
from sklearn.decomposition import PCA as SklearnPCA


class PCAConvergenceError(RuntimeError):
    """Raised when the principal axes cannot be computed"""


class PCA:
    """
    Principal components of z-score normalized data.

    After fitting, ``U`` holds the first ``k`` principal axes of the
    normalized data as columns, and ``min``/``max`` the componentwise
    bounds of the data projected onto them. ``recover`` maps a vector from
    the unit cube ``[0, 1]^k`` back through those bounds into data space.
    """

    # Dimensions whose standard deviation falls below this count as constant
    ZERO_VARIANCE_EPSILON = 1e-12

    def __init__(self, data, k: int):
        data = np.array(data, dtype=np.float64)
        if data.ndim != 2:
            raise ValueError(f"PCA data must be 2D array, got {data.ndim}D")
        if data.shape[0] == 0:
            raise ValueError("PCA data is empty")
        if not 1 <= k <= data.shape[1]:
            raise ValueError(
                f"k must be between 1 and {data.shape[1]}, got {k}"
            )
        self.k = k

        # normalize data
        self.means = data.mean(axis=0)
        data -= self.means
        stddevs = np.sqrt(np.mean(data**2, axis=0))
        # constant dimensions stay centered at zero instead of dividing by zero
        self.stddevs = np.where(stddevs < self.ZERO_VARIANCE_EPSILON, 1.0, stddevs)
        data /= self.stddevs
        self.data = data

        if not np.all(np.isfinite(data)):
            raise PCAConvergenceError("Normalized data contains non-finite values")

        if data.shape[0] < 2:
            # a single sample has no spread, every axis projects to zero
            self.U = np.eye(data.shape[1])[:, :k]
        else:
            # fewer samples than components leaves the extra columns at zero
            n_components = min(k, data.shape[0])
            try:
                fitted = SklearnPCA(n_components=n_components, svd_solver="full").fit(
                    data
                )
            except np.linalg.LinAlgError as e:
                raise PCAConvergenceError(f"SVD did not converge: {e}") from e
            self.U = np.zeros((data.shape[1], k))
            self.U[:, :n_components] = fitted.components_.T

        projected = self.data @ self.U
        self.min = projected.min(axis=0)
        self.max = projected.max(axis=0)

    def transform(self, samples) -> np.ndarray:
        """Project samples (one per row) into PCA space"""
        samples = np.asarray(samples, dtype=np.float64)
        return ((samples - self.means) / self.stddevs) @ self.U

    def recover(self, vector) -> np.ndarray:
        """Map a unit-cube vector of length ``k`` to a data-space vector"""
        vector = np.asarray(vector, dtype=np.float64)
        if vector.shape != (self.k,):
            raise ValueError(f"Expected vector of length {self.k}, got {vector.shape}")
        scaled = vector * (self.max - self.min) + self.min
        raw = scaled @ self.U.T
        return raw * self.stddevs + self.means
