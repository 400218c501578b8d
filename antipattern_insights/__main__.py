import sys

from antipattern_insights.cli import main

sys.exit(main())
