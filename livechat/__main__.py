"""Entry point for livechat CLI."""

import argparse
import sys

from livechat.app import ChatApp
from livechat.errors import setup_logging

# Set up file logging to ~/livechat.log
setup_logging()


def main():
    parser = argparse.ArgumentParser(description="Live terminal chat")
    parser.add_argument(
        "--threshold",
        "-t",
        type=float,
        help="Rows from the bottom within which new messages are followed",
    )
    parser.add_argument(
        "--no-smooth",
        action="store_true",
        help="Jump to new messages instead of animating the scroll",
    )
    args = parser.parse_args()

    if args.threshold is not None and args.threshold < 0:
        parser.error("--threshold must be non-negative")

    # Set terminal window title
    sys.stdout.write("\033]0;livechat\007")
    sys.stdout.flush()

    try:
        app = ChatApp(
            threshold=args.threshold,
            smooth=False if args.no_smooth else None,
        )
        app.run()
    except (KeyboardInterrupt, SystemExit):
        pass


if __name__ == "__main__":
    main()
