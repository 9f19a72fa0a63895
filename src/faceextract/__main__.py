import sys

from faceextract.cli import main

sys.exit(main())
