"""Start the relay web server with its background cycle (same as ``python -m relay serve``)."""
import sys

from relay.cli import cli

if __name__ == '__main__':
    cli(["serve", *sys.argv[1:]])
