import pytest

from rim.rim_parser import SyntacticalAnalyzer


@pytest.fixture  # type: ignore[misc]
def analyzer() -> SyntacticalAnalyzer:
    return SyntacticalAnalyzer()


@pytest.fixture  # type: ignore[misc]
def shallow_analyzer() -> SyntacticalAnalyzer:
    return SyntacticalAnalyzer(max_depth=3)
