import sys

from yaml_translator.cli import main

sys.exit(main())
