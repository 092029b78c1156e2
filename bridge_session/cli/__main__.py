import sys

from bridge_session.cli import main

sys.exit(main())
