import sys

from signlink.cli import main

sys.exit(main())
