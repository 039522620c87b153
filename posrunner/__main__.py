import sys

from posrunner.main import main

sys.exit(main())
