import sys

from crtz.cli import main

sys.exit(main())
