import sys

from envreport.cli import main

sys.exit(main())
