import os
import sys
sys.path.append(os.getcwd())

from resolvix.core.database import Base, SessionLocal, engine
import resolvix.models.assignment_tracker  # noqa: F401
import resolvix.models.profile  # noqa: F401
from resolvix.services.intake_service import load_role_pools
from resolvix.services.tracker_service import get_cursors


def show_rotation():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        pools = load_role_pools(db)
        cursors = get_cursors(db)
        for role, members in pools.items():
            last = cursors.get(role, -1)
            print(f"\n--- {role.upper()} (last_index={last}) ---")
            if not members:
                print("  (empty pool: intake will fail)")
                continue
            upcoming = (last + 1) % len(members)
            for i, p in enumerate(members):
                marker = "->" if i == upcoming else "  "
                print(f"{marker} [{i}] #{p.id} {p.full_name or '-'} <{p.email}> {p.status}")
    finally:
        db.close()


if __name__ == "__main__":
    show_rotation()
