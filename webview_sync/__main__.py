import sys

from .cli.controller import main

sys.exit(main())
