import sys

from pokepedia.cli import main

sys.exit(main())
