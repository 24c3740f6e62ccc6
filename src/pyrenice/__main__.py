"""Allow running pyrenice with ``python -m pyrenice``."""

import sys

from pyrenice.app import main

sys.exit(main())
