"""Allow ``python -m expense_insights``."""

import sys

from expense_insights.cli import main

sys.exit(main())
