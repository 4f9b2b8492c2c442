import sys

from .shell import entrypoint

if __name__ == "__main__":
    sys.exit(entrypoint())
