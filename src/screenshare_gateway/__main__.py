import sys

from screenshare_gateway.main import main


sys.exit(main())
