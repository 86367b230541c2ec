"""Package entry point for ``python -m hearbuddy``.

RULES:
- Delegates straight to the CLI's main()
"""

from hearbuddy.cli import main

if __name__ == "__main__":
    main()
