"""Test basic package setup and version."""
import lightspeed


def test_version_exists() -> None:
    """Test that version is defined."""
    assert hasattr(lightspeed, "__version__")
    assert lightspeed.__version__ is not None


def test_version_format() -> None:
    """Test that version follows expected format."""
    version = lightspeed.__version__
    assert isinstance(version, str)
    assert len(version.split(".")) >= 2
