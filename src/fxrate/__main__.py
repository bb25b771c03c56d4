"""Allow running the bot with python -m fxrate."""

from fxrate.app import main

main()
