"""Allow ``python -m looper``."""
from .cli import main

if __name__ == "__main__":
    main()
