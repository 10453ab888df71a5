import sys

from driveplayer.cli import main

sys.exit(main())
