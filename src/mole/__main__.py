from mole.cli import app

app()
