import sys

from chipvm.cli import main

sys.exit(main())
