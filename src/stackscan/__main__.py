"""Entry point for running stackscan as a module.

Usage:
    python -m stackscan [command] [options]

Example:
    python -m stackscan analyze --path . --format text
    python -m stackscan categorize --path .
"""

from stackscan.cli import app

if __name__ == "__main__":
    app()
