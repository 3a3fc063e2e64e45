import sys

from wd7launcher.cli import main

sys.exit(main())
