from slotdispatch.cli import run

run()
