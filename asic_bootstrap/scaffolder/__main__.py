"""Allow ``python -m asic_bootstrap.scaffolder``."""

from .cli import main

main()
