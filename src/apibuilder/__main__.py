"""Entry point for 'python -m apibuilder' command."""

from apibuilder.cli import main

if __name__ == "__main__":
    main()
