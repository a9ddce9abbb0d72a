import numpy as np
import pytest


@pytest.fixture(autouse=True)
def seed_random():
    # Random factories draw from numpy's global random source
    np.random.seed(1234)
