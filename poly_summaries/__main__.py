import sys

from poly_summaries.cli import main

sys.exit(main())
