"""Allow ``python -m cronguard``."""

from cronguard.cli import app

if __name__ == "__main__":
    app()
