"""BDD tests for span export features."""

import pytest
from pytest_bdd import scenarios

scenarios("export.feature")

pytestmark = [
    pytest.mark.tier(1),
    pytest.mark.tra("Core.Exporter.FanOut"),
]
