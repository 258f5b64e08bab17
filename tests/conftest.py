"""
Shared pytest fixtures for colgen tests.
"""

import pytest

from colgen.core.instance import CuttingStockInstance


def pytest_configure(config):
    """Add custom markers."""
    config.addinivalue_line("markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')")


@pytest.fixture
def worked_instance():
    """
    Textbook instance: W=100, five item types.

    Starter objective 131, first duals all 1, first pattern [4,0,0,0,0]
    with reduced cost -3, LP optimum 57.25.
    """
    return CuttingStockInstance(
        roll_width=100,
        demands=[45, 38, 25, 11, 12],
        widths=[22, 42, 52, 53, 78],
        name="worked_example",
    )


@pytest.fixture
def small_instance():
    """A small instance whose optimal patterns fill the roll exactly."""
    return CuttingStockInstance(
        roll_width=10,
        demands=[10, 10, 10],
        widths=[5, 3, 2],
        name="small_exact",
    )


@pytest.fixture
def bpplib_file(tmp_path):
    """The worked instance written in BPPLIB CSP format."""
    path = tmp_path / "worked.txt"
    path.write_text("5\n100\n22 45\n42 38\n52 25\n53 11\n78 12\n")
    return path


class _ForcedStatusHighs:
    """Highs wrapper whose getModelStatus() reports a fixed status."""

    def __init__(self, highs, status):
        self._wrapped = highs
        self._status = status

    def getModelStatus(self):
        return self._status

    def __getattr__(self, name):
        return getattr(self._wrapped, name)


@pytest.fixture
def force_highs_status(monkeypatch):
    """
    Make a HiGHS-backed model report the given model status after run().

    Usage:
        force_highs_status(master, highspy.HighsModelStatus.kSolveError)
    """
    def force(owner, status):
        monkeypatch.setattr(owner, '_highs', _ForcedStatusHighs(owner._highs, status))
        return owner._highs

    return force
