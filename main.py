"""Entry point for the addEvents sink."""

import sys

from addevents_sink.cli import main

if __name__ == "__main__":
    sys.exit(main())
