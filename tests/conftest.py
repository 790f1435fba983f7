import pytest
from click.testing import CliRunner

from extract_sql.registry import TranslatableRegistry


@pytest.fixture()
def cli_runner() -> CliRunner:
    """Provides a reusable Click CLI runner."""
    return CliRunner()


@pytest.fixture()
def registry() -> TranslatableRegistry:
    """Registry with a single translatable column, ``t.b``."""
    return TranslatableRegistry({"t": ["b"]})
