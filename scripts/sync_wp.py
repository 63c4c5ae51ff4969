"""Send the latest city index to the WordPress import endpoint.

Requires WP_URL and WP_TOKEN in environment or .env file.
"""

import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from caixa_imoveis.cli import sync_main


if __name__ == "__main__":
    sys.exit(sync_main())
