"""Bootstrap shim for the frozen launcher.

Freezers (PyInstaller and friends) point at this file; it only hands over to
the CLI so the exit code of the payload becomes the exit code of the exe.
"""

import sys

from wd7launcher.cli import main


sys.exit(main(sys.argv[1:]))
