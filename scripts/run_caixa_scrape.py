"""Run a full CAIXA scrape and write the JSON city index and XLSX details.

Reads HEADLESS, CHROME_PATH and CAIXA_REGION from the environment or .env file.
"""

import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from caixa_imoveis.cli import scrape_main


if __name__ == "__main__":
    sys.exit(scrape_main())
