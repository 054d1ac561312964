import sys

from leaklog._cli import main

sys.exit(main())
