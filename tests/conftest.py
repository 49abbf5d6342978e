"""Shared pytest fixtures for the lambdatree test suite."""

from __future__ import annotations

import pytest

from lambdatree.lang import load
from tests.helpers import arith


@pytest.fixture
def calc():
    """Interpreter over the small arithmetic grammar."""
    return arith()


@pytest.fixture
def math_lang():
    """A fresh ``math`` interpreter with an empty environment."""
    return load("math")
