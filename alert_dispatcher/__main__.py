import sys

from alert_dispatcher.cli import main

if __name__ == "__main__":
    sys.exit(main())
