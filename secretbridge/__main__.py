"""Run the controller with ``python -m secretbridge``."""

from secretbridge.main import main

if __name__ == "__main__":
    main()
