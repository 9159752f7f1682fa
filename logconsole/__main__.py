"""
Allow running the pretty printer as a module: python -m logconsole
"""
from logconsole.cli import main


if __name__ == '__main__':
    main()
