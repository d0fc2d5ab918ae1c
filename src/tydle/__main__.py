from tydle.interfaces.cli.cli import start

raise SystemExit(start())
