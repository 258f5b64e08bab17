import sys

from colgen.cli import main

sys.exit(main())
