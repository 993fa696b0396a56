"""Allow ``python -m tres``."""

from tres.cli import main

main()
