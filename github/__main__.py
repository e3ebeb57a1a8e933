import sys

from github.interfaces.cli import main

sys.exit(main())
