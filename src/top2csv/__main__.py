import sys

from top2csv.cli import main

sys.exit(main())
