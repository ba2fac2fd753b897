import sys
from pathlib import Path

# Ensure project root is on sys.path when running as a script
ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from vnjp_cms.config import load_config
from vnjp_cms.db import connect, init_db


def main() -> None:
    cfg = load_config()
    db = connect(cfg)
    init_db(db)

    print(f"DB initialized: {cfg.DB_URI} / {cfg.DB_NAME}")


if __name__ == "__main__":
    main()
