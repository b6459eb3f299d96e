from branchtree.cli import app

app(prog_name="branchtree")
