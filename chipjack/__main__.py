import sys

from chipjack.cli import main

sys.exit(main())
