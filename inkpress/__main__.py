"""Entry point for the Inkpress CLI.

Running ``python -m inkpress`` calls the main function from the cli module.
"""

from .cli import main

if __name__ == "__main__":  # pragma: no cover
    main()
