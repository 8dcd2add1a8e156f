"""Allow ``python -m perpdesk``."""

import sys

from .cli.main import main

sys.exit(main())
