import sys

from cloud_provisioner.main import main

sys.exit(main())
