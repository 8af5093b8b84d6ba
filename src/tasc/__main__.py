"""Allow ``python -m tasc``."""

from tasc.app import main

main()
