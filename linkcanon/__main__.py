import sys

from linkcanon.cli import main

sys.exit(main())
