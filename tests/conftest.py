import numpy as np
import pytest

from overfit.config import SyntheticDataConfig
from overfit.data.dataset import DataSet
from overfit.io.synthetic_generator import SyntheticGenerator
from overfit.models.linear import LinearModel


@pytest.fixture(scope="session")
def seed():
    return 42


@pytest.fixture
def generator(seed):
    """Linear process y = 1 + 2x + N(0, 0.25^2) on x in [0, 1]."""
    return SyntheticGenerator(SyntheticDataConfig(random_seed=seed))


@pytest.fixture
def linear_data(generator):
    """20 observations from the default generating process."""
    return generator.generate(20)


@pytest.fixture
def hundred_rows():
    """Deterministic dataset with 100 distinct rows (x = row index)."""
    x = np.arange(100, dtype=float)
    return DataSet(x=x, y=2.0 * x)


@pytest.fixture
def fit_linear():
    def _fit(data):
        return LinearModel().fit(data)
    return _fit


class ConstantModel:
    """Predicts the same value everywhere."""

    def __init__(self, value):
        self.value = value

    def predict(self, x):
        return np.full(np.asarray(x).shape[0], self.value, dtype=float)


class ExactModel:
    """Looks up the true response for each x of a given dataset."""

    def __init__(self, data):
        self._lookup = dict(zip(data.x.tolist(), data.y.tolist()))

    def predict(self, x):
        return np.array([self._lookup[v] for v in np.asarray(x).tolist()])


@pytest.fixture
def constant_model():
    return ConstantModel


@pytest.fixture
def exact_model():
    return ExactModel
