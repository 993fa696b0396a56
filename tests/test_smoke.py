"""
Smoke test to verify test infrastructure works
"""

from pathlib import Path


def test_can_import_main_module():
    """Verify we can import the main tres package"""
    package_dir = Path(__file__).parent.parent / "tres"
    assert package_dir.is_dir(), "tres/ package should exist"
    assert (package_dir / "__init__.py").exists(), "tres/__init__.py should exist"

    import tres

    assert hasattr(tres, "TrelloClient"), "Should export TrelloClient"
    assert hasattr(tres, "NameIndex"), "Should export NameIndex"
    assert hasattr(tres, "CardProjector"), "Should export CardProjector"
    assert hasattr(tres, "main"), "Should export main"


def test_fixtures_directory_exists(fixtures_dir):
    """Verify fixtures directory is accessible"""
    assert fixtures_dir.is_dir()
    assert (fixtures_dir / "search_cards.json").exists()
