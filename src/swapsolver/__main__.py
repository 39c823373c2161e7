"""Allow ``python -m swapsolver``."""

from swapsolver.main import main

main()
