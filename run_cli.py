"""
Run the Ingredient Snap CLI.

Usage:
    python run_cli.py [COMMAND] [OPTIONS]

Commands:
    detect    Detect ingredients in a local photo
    parse     Normalize a typed ingredient list
    recipes   Suggest recipes for the given ingredients

Examples:
    python run_cli.py detect fridge.jpg
    python run_cli.py parse "Tomatoes, red onion; basmati rice"
    python run_cli.py recipes tomatoes onions rice

Uses the same environment variables as run_api.py.
"""

import sys
from pathlib import Path

# Ensure src/ is importable
sys.path.insert(0, str(Path(__file__).parent / "src"))

from adapters.cli.main import app

if __name__ == "__main__":
    app()
