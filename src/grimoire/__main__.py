from grimoire.cli import cli

cli()
