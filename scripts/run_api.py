import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

import uvicorn

from vip_access.config import load_config


def main() -> None:
    # Validate before uvicorn imports the factory so a bad config fails with a clear message.
    cfg = load_config().validate()
    uvicorn.run(
        "vip_access.api.server:create_app",
        factory=True,
        host=cfg.HOST,
        port=int(cfg.PORT),
        reload=False,
    )


if __name__ == "__main__":
    main()
