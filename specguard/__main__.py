"""Allow ``python3 -m specguard``."""

import sys

from .cli import main

sys.exit(main())
