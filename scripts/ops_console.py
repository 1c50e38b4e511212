from __future__ import annotations

from opsdeck.apps.console.main import main


if __name__ == "__main__":
    raise SystemExit(main())
