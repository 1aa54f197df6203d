#  Tarslayer entry point: python main.py --tar archive.tar --list
import sys

from tarslayer.main import main


if __name__ == "__main__":
    sys.exit(main())
