import pytest
import random
import sys
from pathlib import Path

# Add src to sys.path so we can import handwriting_toolkit
SRC_PATH = Path(__file__).resolve().parent.parent / "src"
if SRC_PATH.as_posix() not in sys.path:
    sys.path.insert(0, SRC_PATH.as_posix())

from handwriting_toolkit.core.models.settings import Margins, Randomization, Settings  # noqa: E402
from handwriting_toolkit.renderer.layout import FontProvider, PageGeometry  # noqa: E402


# Common test fixtures
@pytest.fixture(scope="session")
def fonts():
    """Shared font provider (glyph caches survive across tests)."""
    return FontProvider()


@pytest.fixture
def small_geometry():
    """Half-resolution A4 raster, keeps rendering tests quick."""
    return PageGeometry(width=620, height=877, dpi=75)


@pytest.fixture
def plain_settings():
    """Settings with every perturbation off and a fixed seed."""
    return Settings(randomization=Randomization.none(), seed=1234)


@pytest.fixture
def messy_settings():
    """Default perturbations plus frequent mistakes."""
    return Settings(randomization=Randomization(error_rate=0.5), seed=99)


@pytest.fixture
def tight_margins():
    """Small margins used by the long-text scenarios."""
    return Margins(top=10, right=10, bottom=10, left=10)


@pytest.fixture
def rng():
    return random.Random(42)
