"""Pytest configuration and fixtures."""
import random

import pytest

from synth.frequency_table import FrequencyTable
from synth.parameters import SynthParameters
from tunings.persistence import TuningsFile
from tunings.store import TuningStore

LOAD_TIMEOUT = 10.0


@pytest.fixture
def frequency_table():
    return FrequencyTable()


@pytest.fixture
def parameters():
    return SynthParameters()


@pytest.fixture
def storage(tmp_path):
    return TuningsFile(tmp_path / "tunings")


@pytest.fixture
def make_store(storage, frequency_table, parameters):
    """Build (unloaded) stores sharing the same data directory."""
    def _make(**kwargs):
        kwargs.setdefault("rng", random.Random(1234))
        return TuningStore(storage, frequency_table, parameters, **kwargs)
    return _make


@pytest.fixture
def store(make_store):
    """A store that finished loading (fresh install)."""
    s = make_store()
    s.load()
    assert s.wait_until_ready(LOAD_TIMEOUT)
    return s
