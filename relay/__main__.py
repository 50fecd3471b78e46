from relay.cli import cli

cli()
