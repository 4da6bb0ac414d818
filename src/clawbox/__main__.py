from clawbox.main import run

run()
