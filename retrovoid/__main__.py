import sys

from retrovoid.main import main

sys.exit(main())
