import sys

from .node_agent_service import main

sys.exit(main())
