"""Allow `python -m refscout`."""

import sys

from .cli import main

sys.exit(main())
