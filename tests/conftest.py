import numpy as np
import pytest

from starsys.data_models import make_star
from starsys.entity_store import EntityStore


class FixedRng:
    """Stand-in for numpy's Generator that replays a fixed sequence of random() values."""

    def __init__(self, values=(0.5,)):
        self._values = list(values)
        self._i = 0

    def random(self):
        value = self._values[self._i % len(self._values)]
        self._i += 1
        return value


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def star():
    return make_star("star", name="Sol", spectral_type="G")


@pytest.fixture
def store(star):
    s = EntityStore()
    s.add(star)
    return s


@pytest.fixture
def fixed_rng():
    return FixedRng
