"""Point d'entrée de l'application FitSync."""

from __future__ import annotations

import sys

from fitsync.cli import main

if __name__ == "__main__":
    sys.exit(main())
