import sys

from shortener.server import main


sys.exit(main())
