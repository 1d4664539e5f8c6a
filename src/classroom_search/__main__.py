import sys

from classroom_search.cli import main


sys.exit(main())
