import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parent
if str(REPO_ROOT / "src" / "org_hierarchy") not in sys.path:
    sys.path.insert(0, str(REPO_ROOT / "src" / "org_hierarchy"))

from org_hierarchy.main import create_app

app = create_app()

if __name__ == "__main__":
    app.run(debug=bool(app.config.get("DEBUG", False)))
