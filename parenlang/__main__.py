import sys

from parenlang.main import main

sys.exit(main())
