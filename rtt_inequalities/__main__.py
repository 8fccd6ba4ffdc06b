import sys

from rtt_inequalities.cli import main

sys.exit(main())
