import sys

from costing_tool.cli import main

if __name__ == "__main__":
    sys.exit(main())
