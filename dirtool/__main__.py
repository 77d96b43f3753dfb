import sys

from dirtool.main import main

sys.exit(main())
