"""Allow ``python -m libgen``."""

import sys

from libgen.cli import main

sys.exit(main())
