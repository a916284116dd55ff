"""Allow ``python -m aittributor`` as the hook command."""

from aittributor.cli import main

if __name__ == "__main__":
    main(prog_name="aittributor")
